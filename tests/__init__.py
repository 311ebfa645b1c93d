"""Tests - Test suite for the Fibonacci STARK."""
