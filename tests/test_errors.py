import pytest

from artflow.errors import (
    ArtError,
    EndCallbackError,
    NextNodeNull,
    NodeEntityNotFound,
    ServiceNotFound,
    UnknownError,
    as_art_error,
)


def test_service_not_found_message_and_name():
    err = ServiceNotFound("sa")
    assert str(err) == "Service[sa] not found"
    assert err.name == "sa"


def test_node_entity_not_found_message():
    err = NodeEntityNotFound("start")
    assert str(err) == "Node Service Entity [start] not found"
    assert err.name == "start"


def test_next_node_null_message():
    assert str(NextNodeNull()) == (
        ">NextNodeNull< next node is null, service node can not call next function."
    )


@pytest.mark.parametrize(
    "err",
    [
        UnknownError("x"),
        EndCallbackError(ValueError("boom")),
        ServiceNotFound("a"),
        NodeEntityNotFound("b"),
        NextNodeNull(),
    ],
)
def test_all_errors_share_base(err):
    assert isinstance(err, ArtError)
    assert as_art_error(err) is err
    with pytest.raises(ArtError) as info:
        raise err
    assert info.value is err


def test_unknown_error_keeps_info():
    err = UnknownError("not found error")
    assert err.info == "not found error"
    assert str(err).startswith("EndCallbackError:")
    assert "not found error" in str(err)


def test_end_callback_error_keeps_cause():
    cause = RuntimeError("callback failed")
    err = EndCallbackError(cause)
    assert err.cause is cause
    assert str(cause) in str(err)


def test_as_art_error_returns_art_errors_unchanged():
    err = ServiceNotFound("x")
    assert as_art_error(err) is err


def test_as_art_error_wraps_foreign_exceptions():
    cause = ValueError("bad value")
    wrapped = as_art_error(cause)
    assert isinstance(wrapped, ArtError)
    assert wrapped.__cause__ is cause
    assert str(wrapped) == str(cause)