"""Tests for the core value types: Message, File, SenderConfig."""

import base64
from dataclasses import FrozenInstanceError

import pytest

from mailsubmit.core import Credential, File, Message, SenderConfig, split_host_port


class TestFile:
    def test_from_bytes_encodes_base64(self):
        f = File.from_bytes("hello.txt", b"hello world")

        assert f.name == "hello.txt"
        assert f.content_type == "text/plain"
        assert base64.b64decode(f.content) == b"hello world"
        assert f.size == 11

    def test_from_bytes_unknown_type(self):
        f = File.from_bytes("blob.unknownext", b"\x00\x01")
        assert f.content_type == "application/octet-stream"

    def test_from_bytes_explicit_type(self):
        f = File.from_bytes("data", b"{}", content_type="application/json")
        assert f.content_type == "application/json"

    def test_from_path(self, temp_dir):
        path = temp_dir / "logo.png"
        path.write_bytes(b"\x89PNG fake")

        f = File.from_path(path)

        assert f.name == "logo.png"
        assert f.content_type == "image/png"
        assert base64.b64decode(f.content) == b"\x89PNG fake"

    def test_from_path_missing_file(self, temp_dir):
        with pytest.raises(OSError):
            File.from_path(temp_dir / "missing.pdf")

    def test_is_immutable(self):
        f = File("a.txt", "text/plain", "")
        with pytest.raises(FrozenInstanceError):
            f.name = "b.txt"


class TestMessage:
    def test_from_dict(self):
        message = Message.from_dict({
            "id": "<1@x.com>",
            "from": "a@x.com",
            "to": "b@x.com",
            "subject": "Hi",
            "body_text": "hello",
            "attachments": [{"name": "r.pdf", "type": "application/pdf", "content": "cmVwb3J0"}],
        })

        assert message.sender == "a@x.com"
        assert message.to == "b@x.com"
        assert message.cc == ""
        assert message.body_html == ""
        assert message.inlines == []
        assert message.attachments == [File("r.pdf", "application/pdf", "cmVwb3J0")]
        assert message.id == "<1@x.com>"

    def test_dict_round_trip(self, sample_message, sample_files):
        inlines, attachments = sample_files
        sample_message.inlines = inlines
        sample_message.attachments = attachments

        assert Message.from_dict(sample_message.to_dict()) == sample_message

    def test_from_dict_null_lists(self):
        message = Message.from_dict({"from": "a@x.com", "inlines": None, "attachments": None})
        assert message.files == []

    def test_files_order(self, sample_files):
        inlines, attachments = sample_files
        message = Message(inlines=inlines, attachments=attachments)
        assert message.files == inlines + attachments

    def test_has_body(self):
        assert not Message().has_body
        assert Message(body_html="<p>x</p>").has_body


class TestSenderConfig:
    def test_headers_are_snapshotted(self):
        headers = {"X-Mailer": "mailsubmit"}
        config = SenderConfig("smtp.example.com", headers=headers)

        headers["X-Late"] = "added"

        assert dict(config.headers) == {"X-Mailer": "mailsubmit"}
        with pytest.raises(TypeError):
            config.headers["X-New"] = "nope"

    def test_from_address(self):
        config = SenderConfig.from_address("smtp.example.com:2525")
        assert config.host == "smtp.example.com"
        assert config.port == 2525
        assert config.address == "smtp.example.com:2525"

    def test_ipv6_address(self):
        config = SenderConfig.from_address("[::1]:25")
        assert config.host == "::1"
        assert config.address == "[::1]:25"

    @pytest.mark.parametrize(
        "address",
        ["smtp.example.com", "smtp.example.com:", ":25", "host:abc", "host:70000", "::1:25", "[::1]"],
    )
    def test_split_host_port_rejects(self, address):
        with pytest.raises(ValueError):
            split_host_port(address)

    def test_credential_password_hidden_from_repr(self):
        credential = Credential("me@example.com", password="hunter2")
        assert "hunter2" not in repr(credential)
        assert str(SenderConfig("smtp.example.com", credential=credential)) == (
            "me@example.com@smtp.example.com:587"
        )
