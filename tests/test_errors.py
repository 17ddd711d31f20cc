import pytest

from mlxgfx.errors import MlxErrno, MlxError, strerror


def test_strerror_success():
    assert strerror(MlxErrno.SUCCESS) == "No Errors"


def test_strerror_accepts_plain_int():
    assert strerror(15) == "String is too big to be drawn"
    assert strerror(MlxErrno.STRTOOBIG) == strerror(15)


def test_every_code_has_a_distinct_message():
    messages = [strerror(code) for code in MlxErrno]
    assert len(set(messages)) == len(MlxErrno)
    assert all(messages)


@pytest.mark.parametrize("code", [-1, 16, 100])
def test_strerror_out_of_range(code):
    with pytest.raises(ValueError):
        strerror(code)


def test_error_carries_code_and_message():
    err = MlxError(MlxErrno.INVPNG)
    assert err.code is MlxErrno.INVPNG
    assert str(err) == "PNG file is invalid or corrupted"


def test_error_from_int_code():
    err = MlxError(6)
    assert err.code is MlxErrno.INVDIM
    assert str(err) == strerror(MlxErrno.INVDIM)


def test_error_with_bad_code():
    with pytest.raises(ValueError):
        MlxError(99)


def test_error_is_raisable():
    error = MlxError(MlxErrno.WINFAIL)
    assert str(error) == "Failed to create window"
    with pytest.raises(MlxError, match="Failed to create window") as info:
        raise error
    assert info.value.code is MlxErrno.WINFAIL