import json

from linkrelay.fetchers.base import FetchResult
from linkrelay.fetchers.exceptions import FetchError, SizeLimitExceeded
from linkrelay.fetchers.manager import Fetcher
from linkrelay.relay.classify import TRUNCATION_SUFFIX, format_text, media_kind
from linkrelay.relay.handler import LinkRelay
from linkrelay.relay.messages import (
    AudioMessage,
    DocumentMessage,
    ErrorMessage,
    ImageMessage,
    TextMessage,
    VideoMessage,
)
from linkrelay.scratch import ScratchDirectory


CHAT = "123@s.whatsapp.net"


class RecordingSender:
    def __init__(self, fail_kinds=()):
        self.sent = []
        self.fail_kinds = set(fail_kinds)

    def send(self, chat_id, message):
        if message.kind in self.fail_kinds:
            raise RuntimeError(f"cannot send {message.kind}")
        self.sent.append((chat_id, message))


class StaticStrategy:
    name = "static"

    def __init__(self, content_type="", body=b"", headers=None, error=None):
        self.headers = {"content-type": content_type} if content_type else {}
        self.headers.update(headers or {})
        self.body = body
        self.error = error
        self.urls = []

    def fetch(self, url, headers, timeout, max_bytes):
        self.urls.append(url)
        if self.error is not None:
            raise self.error
        return FetchResult(url=url, status_code=200, headers=self.headers, body=self.body, strategy=self.name)


def _relay(tmp_path, *strategies, sender=None):
    sender = sender or RecordingSender()
    scratch = ScratchDirectory(tmp_path / "scratch")
    relay = LinkRelay(sender, Fetcher(list(strategies)), scratch)
    return relay, sender, scratch


def _scratch_files(scratch):
    if not scratch.path.exists():
        return []
    return list(scratch.path.iterdir())


def test_json_is_pretty_printed(tmp_path):
    relay, sender, scratch = _relay(tmp_path, StaticStrategy("application/json", b'{"a":1,"b":[1,2]}'))
    outcome = relay.relay("https://example.com/data.json", CHAT)
    assert isinstance(outcome, TextMessage)
    assert outcome.text == json.dumps({"a": 1, "b": [1, 2]}, indent=2)
    assert sender.sent == [(CHAT, outcome)]
    assert _scratch_files(scratch) == []


def test_invalid_json_falls_back_to_plain_text(tmp_path):
    relay, sender, _ = _relay(tmp_path, StaticStrategy("application/json", b"{not json"))
    outcome = relay.relay("https://example.com/broken.json", CHAT)
    assert outcome == TextMessage("{not json")


def test_plain_text_is_sent_as_is():
    assert format_text("hello world", "text/plain") == "hello world"
    assert format_text('{"x": true}', "text/html") == '{\n  "x": true\n}'


def test_long_text_is_truncated(tmp_path):
    body = ("a" * 65536 + "b" * 100).encode()
    relay, _, _ = _relay(tmp_path, StaticStrategy("text/plain", body))
    outcome = relay.relay("https://example.com/big.txt", CHAT)
    assert outcome.text == "a" * 65536 + TRUNCATION_SUFFIX


def test_text_at_the_limit_is_not_truncated(tmp_path):
    relay, _, _ = _relay(tmp_path, StaticStrategy("text/plain", b"a" * 65536))
    outcome = relay.relay("https://example.com/exact.txt", CHAT)
    assert outcome.text == "a" * 65536


def test_image_is_written_once_and_captioned_with_url(tmp_path):
    relay, sender, scratch = _relay(tmp_path, StaticStrategy("image/png", b"\x89PNG"))
    url = "https://example.com/media/logo.png?v=3"
    outcome = relay.relay(url, CHAT)
    files = _scratch_files(scratch)
    assert isinstance(outcome, ImageMessage)
    assert outcome.caption == url
    assert files == [outcome.path]
    assert outcome.path.name.endswith("_logo.png")
    assert outcome.path.read_bytes() == b"\x89PNG"
    assert len(sender.sent) == 1


def test_media_kinds(tmp_path):
    video, _, _ = _relay(tmp_path, StaticStrategy("video/mp4", b"v"))
    assert isinstance(video.relay("https://example.com/clip.mp4", CHAT), VideoMessage)

    audio, _, _ = _relay(tmp_path, StaticStrategy("audio/ogg; codecs=opus", b"a"))
    outcome = audio.relay("https://example.com/voice.ogg", CHAT)
    assert isinstance(outcome, AudioMessage)
    assert outcome.mimetype == "audio/ogg; codecs=opus"

    doc, _, _ = _relay(tmp_path, StaticStrategy("application/pdf", b"%PDF"))
    outcome = doc.relay("https://example.com/files/report.pdf", CHAT)
    assert isinstance(outcome, DocumentMessage)
    assert outcome.filename == "report.pdf"
    assert outcome.mimetype == "application/pdf"


def test_missing_content_type_is_a_document(tmp_path):
    relay, _, _ = _relay(tmp_path, StaticStrategy("", b"\x00\x01"))
    outcome = relay.relay("example.com", CHAT)
    assert isinstance(outcome, DocumentMessage)
    assert outcome.filename == "downloaded_file"
    assert outcome.mimetype == "application/octet-stream"
    assert media_kind("IMAGE/JPEG") == "image"


def test_declared_size_over_cap_sends_one_error_and_writes_nothing(tmp_path):
    strategy = StaticStrategy("video/mp4", b"", headers={"content-length": str(104857601)})
    relay, sender, scratch = _relay(tmp_path, strategy)
    outcome = relay.relay("https://example.com/huge.mp4", CHAT)
    assert isinstance(outcome, ErrorMessage)
    assert outcome.text == "⚠️ File too large (100.00 MB). Maximum size: 100.00 MB"
    assert sender.sent == [(CHAT, outcome)]
    assert _scratch_files(scratch) == []


def test_streamed_size_over_cap_is_reported(tmp_path):
    relay, sender, scratch = _relay(tmp_path, StaticStrategy(error=SizeLimitExceeded(2 * 1024 ** 3, 100 * 1024 ** 2)))
    outcome = relay.relay("https://example.com/stream", CHAT)
    assert outcome.text.startswith("⚠️ File too large (2.00 GB)")
    assert len(sender.sent) == 1
    assert _scratch_files(scratch) == []


def test_all_strategies_failing_sends_last_error(tmp_path):
    strategies = [StaticStrategy(error=FetchError(f"failure {i}", strategy=str(i))) for i in range(3)]
    relay, sender, scratch = _relay(tmp_path, *strategies)
    outcome = relay.relay("example.com/x", CHAT)
    assert outcome == ErrorMessage("❌ Could not fetch: failure 2")
    assert sender.sent == [(CHAT, outcome)]
    assert _scratch_files(scratch) == []
    assert strategies[0].urls == ["https://example.com/x"]


def test_unexpected_error_is_relayed_not_raised(tmp_path):
    sender = RecordingSender(fail_kinds={"text"})
    relay, _, _ = _relay(tmp_path, StaticStrategy("text/plain", b"hi"), sender=sender)
    outcome = relay.relay("https://example.com/", CHAT)
    assert outcome == ErrorMessage("❌ Error: cannot send text")
    assert sender.sent == [(CHAT, outcome)]


def test_failure_to_send_error_is_swallowed(tmp_path):
    sender = RecordingSender(fail_kinds={"text", "error"})
    relay, _, _ = _relay(tmp_path, StaticStrategy("text/plain", b"hi"), sender=sender)
    assert relay.relay("https://example.com/", CHAT) is None


def test_image_with_very_long_name_is_still_relayed(tmp_path):
    relay, _, scratch = _relay(tmp_path, StaticStrategy("image/png", b"\x89PNG"))
    url = "https://example.com/" + "x" * 300 + ".png"
    outcome = relay.relay(url, CHAT)
    assert isinstance(outcome, ImageMessage)
    assert outcome.caption == url
    assert _scratch_files(scratch) == [outcome.path]
