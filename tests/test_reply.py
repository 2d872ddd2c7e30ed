"""Tests for reply framing in ControlChannel.read_reply()."""

import pytest

from ftp_control_mcp.protocol.errors import ConnectionClosedError, IllegalReplyError
from ftp_control_mcp.protocol.reply import Reply


def test_single_line_reply(make_channel):
    """A "<code> <text>" line is a complete reply with one message."""
    channel, _ = make_channel("331 Please specify the password.")
    reply = channel.read_reply()
    assert reply == Reply(code=331, messages=("Please specify the password.",))


def test_multi_line_reply(make_channel):
    """Hyphen lines continue the reply until a space line ends it."""
    channel, _ = make_channel("250-First line.", "250-Second line.", "250 End.")
    reply = channel.read_reply()
    assert reply.code == 250
    assert reply.messages == ("First line.", "Second line.", "End.")


def test_consecutive_replies_are_read_separately(make_channel):
    """Transfer commands answer twice; each read_reply returns one of them."""
    channel, _ = make_channel("150 Opening data connection.", "226 Transfer complete.")
    assert channel.read_reply().code == 150
    assert channel.read_reply().code == 226


def test_mismatched_continuation_code(make_channel):
    """A continuation line declaring another code is a framing error."""
    channel, _ = make_channel("250-a", "251 b")
    with pytest.raises(IllegalReplyError) as excinfo:
        channel.read_reply()
    assert excinfo.value.line == "251 b"


def test_short_first_line(make_channel):
    """A first line shorter than a code is rejected."""
    channel, _ = make_channel("22")
    with pytest.raises(IllegalReplyError):
        channel.read_reply()


def test_empty_first_line(make_channel):
    channel, _ = make_channel("")
    with pytest.raises(IllegalReplyError):
        channel.read_reply()


def test_non_numeric_first_line(make_channel):
    """A first line without a leading code is rejected."""
    channel, _ = make_channel("abc Welcome")
    with pytest.raises(IllegalReplyError):
        channel.read_reply()


def test_signed_prefix_is_not_a_code(make_channel):
    """Only three ASCII digits count as a reply code."""
    channel, _ = make_channel("+12 hello")
    with pytest.raises(IllegalReplyError):
        channel.read_reply()


def test_non_numeric_continuation_line_is_message_text(make_channel):
    """Uncoded lines inside a multi-line reply are kept verbatim."""
    channel, _ = make_channel("211-Features:", " MDTM", " UTF8", "211 End")
    reply = channel.read_reply()
    assert reply.code == 211
    assert reply.messages == ("Features:", " MDTM", " UTF8", "End")


def test_short_continuation_line_is_message_text(make_channel):
    channel, _ = make_channel("214-Help", "", "ok", "214 Done")
    reply = channel.read_reply()
    assert reply.messages == ("Help", "", "ok", "Done")


def test_zero_code_continuation_line_is_message_text(make_channel):
    """A "000" prefix inside a reply does not count as a different code."""
    channel, _ = make_channel("250-start", "000 zeros", "250 end")
    reply = channel.read_reply()
    assert reply.code == 250
    assert reply.messages == ("start", "000 zeros", "end")


def test_bare_code_line_is_message_text(make_channel):
    """A line holding only the code carries no separator and does not end the reply."""
    channel, _ = make_channel("250", "250 End")
    reply = channel.read_reply()
    assert reply.code == 250
    assert reply.messages == ("250", "End")


def test_zero_first_code_is_adopted_then_replaced(make_channel):
    """A "000" first line leaves the code unset; the next coded line sets it."""
    channel, _ = make_channel("000 hi", "220 ok")
    reply = channel.read_reply()
    assert reply.code == 220
    assert reply.messages == ("000 hi", "ok")


def test_empty_continuation_text(make_channel):
    """"250-" continues with an empty message line."""
    channel, _ = make_channel("250-", "250 ")
    reply = channel.read_reply()
    assert reply.messages == ("", "")


def test_invalid_separator(make_channel):
    channel, _ = make_channel("250*oops")
    with pytest.raises(IllegalReplyError) as excinfo:
        channel.read_reply()
    assert excinfo.value.reason == "invalid separator '*'"


def test_end_of_stream_inside_reply(make_channel):
    """Running out of input mid-reply is an I/O failure, not a framing error."""
    channel, _ = make_channel("250-First line.", "250-Second line.")
    with pytest.raises(ConnectionClosedError) as excinfo:
        channel.read_reply()
    assert isinstance(excinfo.value, OSError)
    assert not isinstance(excinfo.value, IllegalReplyError)


def test_end_of_stream_before_reply(make_channel):
    channel, _ = make_channel()
    with pytest.raises(ConnectionClosedError):
        channel.read_reply()


def test_reply_str_renders_wire_form():
    reply = Reply(code=250, messages=("First line.", "End."))
    assert str(reply) == "250-First line.\n250 End."


def test_reply_message_and_dict():
    reply = Reply(code=211, messages=("a", "b"))
    assert reply.message == "a\nb"
    assert reply.to_dict() == {"code": 211, "messages": ["a", "b"]}


def test_reply_is_immutable():
    reply = Reply(code=200, messages=("OK",))
    with pytest.raises(AttributeError):
        reply.code = 500
