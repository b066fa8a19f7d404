"""Tests for password helpers."""

from portal.services.password import (
    TEMP_PASSWORD_ALPHABET,
    generate_temp_password,
    hash_password,
    validate_password,
    verify_password,
)


def test_hash_round_trip():
    hashed = hash_password("hunter22")
    assert hashed != "hunter22"
    assert verify_password("hunter22", hashed)
    assert not verify_password("hunter23", hashed)


def test_validate_password_length():
    assert validate_password("short") == (False, "Password must be at least 8 characters")
    assert validate_password("long enough") == (True, None)


def test_temp_password_shape():
    password = generate_temp_password()
    assert len(password) == 12
    assert set(password) <= set(TEMP_PASSWORD_ALPHABET)


def test_temp_passwords_differ():
    assert len({generate_temp_password() for _ in range(20)}) == 20
