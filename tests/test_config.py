"""Tests for configuration assembly and fingerprints."""

import numpy as np

from primitives.extension import BabyBearExt4, Mersenne31Ext3
from primitives.field import BabyBear, Mersenne31
from primitives.transcript import DuplexChallenger, SerializingChallenger32
from protocol.config import baby_bear_config, mersenne31_config
from protocol.pcs import CirclePcs, TwoAdicFriPcs


class TestProfiles:

    def test_baby_bear_components(self) -> None:
        config = baby_bear_config(np.random.default_rng(0))
        assert config.field is BabyBear
        assert config.ext is BabyBearExt4
        assert isinstance(config.pcs, TwoAdicFriPcs)
        assert isinstance(config.new_challenger(), DuplexChallenger)
        assert config.fri_config.log_blowup == 1
        assert config.fri_config.num_queries == 100
        assert config.fri_config.proof_of_work_bits == 16
        assert config.fri_config.conjectured_soundness_bits() == 116

    def test_mersenne31_components(self) -> None:
        config = mersenne31_config()
        assert config.field is Mersenne31
        assert config.ext is Mersenne31Ext3
        assert isinstance(config.pcs, CirclePcs)
        assert isinstance(config.new_challenger(), SerializingChallenger32)
        assert config.fri_config.num_queries == 100

    def test_fresh_challengers(self) -> None:
        config = mersenne31_config()
        a, b = config.new_challenger(), config.new_challenger()
        assert a is not b
        a.observe(1)
        b.observe(1)
        assert a.sample() == b.sample()


class TestFingerprints:

    def test_same_seed_same_fingerprint(self) -> None:
        a = baby_bear_config(np.random.default_rng(5))
        b = baby_bear_config(np.random.default_rng(5))
        assert a.fingerprint() == b.fingerprint()

    def test_different_seed_different_fingerprint(self) -> None:
        a = baby_bear_config(np.random.default_rng(5))
        b = baby_bear_config(np.random.default_rng(6))
        assert a.fingerprint() != b.fingerprint()

    def test_profiles_differ(self) -> None:
        assert baby_bear_config(np.random.default_rng(5)).fingerprint() != mersenne31_config().fingerprint()

    def test_mersenne31_reproducible(self) -> None:
        assert mersenne31_config().fingerprint() == mersenne31_config().fingerprint()

    def test_fri_parameters_change_fingerprint(self) -> None:
        assert mersenne31_config().fingerprint() != mersenne31_config(num_queries=99).fingerprint()
        assert mersenne31_config().fingerprint() != mersenne31_config(proof_of_work_bits=8).fingerprint()
        assert mersenne31_config().fingerprint() != mersenne31_config(log_blowup=2).fingerprint()

    def test_challenger_seed_changes_fingerprint(self) -> None:
        assert mersenne31_config().fingerprint() != mersenne31_config(challenger_seed=b"x").fingerprint()
