"""Tests for audio-to-MIDI conversion, caching and cancellation."""

import io
import random
import threading
import time

import pretty_midi
import pytest

from midicompare.config import ConversionConfig
from midicompare.conversion import (
    AudioFingerprint,
    AudioToMidiConverter,
    CancellationToken,
    ConversionCache,
    ConversionStatus,
    FallbackScale,
    choose_fallback_scale,
    fallback_pitches,
)
from midicompare.core import AudioDecodeError, ConversionCancelledError
from midicompare.input import AudioLoader


def wait_for(condition, timeout=5.0):
    deadline = time.monotonic() + timeout
    while not condition():
        if time.monotonic() > deadline:
            raise AssertionError("condition not reached")
        time.sleep(0.005)


class CountingLoader(AudioLoader):
    """AudioLoader that records how often it decodes."""

    def __init__(self, **kwargs):
        super().__init__(**kwargs)
        self.calls = 0

    def load(self, path):
        self.calls += 1
        return super().load(path)


# ============================================================================
# Cancellation token
# ============================================================================

class TestCancellationToken:

    def test_starts_uncancelled(self):
        token = CancellationToken()
        assert not token.cancelled
        token.raise_if_cancelled("processing")

    def test_cancel_is_idempotent(self):
        token = CancellationToken()
        token.cancel()
        token.cancel()
        assert token.cancelled

    def test_raise_carries_stage(self):
        token = CancellationToken()
        token.cancel()
        with pytest.raises(ConversionCancelledError) as exc_info:
            token.raise_if_cancelled("transcribing")
        assert exc_info.value.stage == "transcribing"


# ============================================================================
# Cache
# ============================================================================

class TestConversionCache:

    def test_hit_after_compute(self):
        cache = ConversionCache()
        calls = []

        def compute():
            calls.append(1)
            return "midi"

        assert cache.get_or_compute("k", compute) == "midi"
        assert cache.get_or_compute("k", compute) == "midi"
        assert len(calls) == 1
        assert cache.stats()["hits"] == 1
        assert cache.stats()["misses"] == 1

    def test_lru_eviction(self):
        cache = ConversionCache(max_size=2)
        cache.set("a", 1)
        cache.set("b", 2)
        cache.get("a")  # a is now most recent
        cache.set("c", 3)

        assert "a" in cache
        assert "b" not in cache
        assert "c" in cache
        assert cache.stats()["evictions"] == 1

    def test_rejected_results_not_stored(self):
        cache = ConversionCache(should_store=lambda value: value != "cancelled")
        assert cache.get_or_compute("k", lambda: "cancelled") == "cancelled"
        assert "k" not in cache
        assert cache.get_or_compute("k", lambda: "done") == "done"
        assert cache.get("k") == "done"

    def test_exception_not_cached(self):
        cache = ConversionCache()

        def boom():
            raise ValueError("decode failed")

        with pytest.raises(ValueError):
            cache.get_or_compute("k", boom)
        assert "k" not in cache
        assert not cache.in_flight("k")
        assert cache.get_or_compute("k", lambda: 42) == 42

    def test_delete_and_clear(self):
        cache = ConversionCache()
        cache.set("a", 1)
        cache.set("b", 2)
        assert cache.delete("a")
        assert not cache.delete("a")
        cache.clear()
        assert len(cache) == 0

    def test_concurrent_calls_share_one_computation(self):
        cache = ConversionCache()
        release = threading.Event()
        calls = []
        results = []

        def compute():
            calls.append(1)
            release.wait(5)
            return "shared"

        def worker():
            results.append(cache.get_or_compute("k", compute))

        owner = threading.Thread(target=worker)
        owner.start()
        wait_for(lambda: cache.in_flight("k"))

        waiter = threading.Thread(target=worker)
        waiter.start()
        wait_for(lambda: cache.stats()["shared"] == 1)

        release.set()
        owner.join(5)
        waiter.join(5)

        assert results == ["shared", "shared"]
        assert len(calls) == 1
        assert cache.stats()["in_flight"] == 0

    def test_waiter_recomputes_after_rejected_result(self):
        cache = ConversionCache(should_store=lambda value: value != "cancelled")
        release = threading.Event()
        results = {}

        def owner_compute():
            release.wait(5)
            return "cancelled"

        owner = threading.Thread(
            target=lambda: results.setdefault("owner", cache.get_or_compute("k", owner_compute))
        )
        owner.start()
        wait_for(lambda: cache.in_flight("k"))

        waiter = threading.Thread(
            target=lambda: results.setdefault("waiter", cache.get_or_compute("k", lambda: "converted"))
        )
        waiter.start()
        wait_for(lambda: cache.stats()["shared"] == 1)

        release.set()
        owner.join(5)
        waiter.join(5)

        assert results == {"owner": "cancelled", "waiter": "converted"}
        assert cache.get("k") == "converted"

    def test_cancelled_waiter_stops_waiting(self):
        cache = ConversionCache(poll_interval=0.01)
        release = threading.Event()
        results = {}

        def slow():
            release.wait(5)
            return "converted"

        def wait_with(token):
            try:
                results["waiter"] = cache.get_or_compute("k", lambda: "own run", token=token)
            except ConversionCancelledError as e:
                results["waiter"] = e.stage

        owner = threading.Thread(target=lambda: results.setdefault("owner", cache.get_or_compute("k", slow)))
        owner.start()
        wait_for(lambda: cache.in_flight("k"))

        token = CancellationToken()
        waiter = threading.Thread(target=wait_with, args=(token,))
        waiter.start()
        wait_for(lambda: cache.stats()["shared"] == 1)

        token.cancel()
        waiter.join(2)
        assert not waiter.is_alive()
        assert results["waiter"] == "waiting"
        # The shared run is untouched
        assert cache.in_flight("k")

        release.set()
        owner.join(5)
        assert results["owner"] == "converted"
        assert cache.get("k") == "converted"


class TestAudioFingerprint:

    def test_from_path(self, tmp_path):
        path = tmp_path / "take.wav"
        path.write_bytes(b"0123456789")
        fp = AudioFingerprint.from_path(str(path))
        assert fp.name == "take.wav"
        assert fp.size == 10
        assert str(fp).startswith("take.wav-10-")

    def test_same_file_same_fingerprint(self, tmp_path):
        path = tmp_path / "take.wav"
        path.write_bytes(b"abc")
        assert AudioFingerprint.from_path(str(path)) == AudioFingerprint.from_path(str(path))

    def test_missing_file(self, tmp_path):
        with pytest.raises(OSError):
            AudioFingerprint.from_path(str(tmp_path / "missing.wav"))


# ============================================================================
# Fallback
# ============================================================================

class TestFallback:

    def test_seeded_choice_is_repeatable(self):
        first = [choose_fallback_scale(random.Random(seed)) for seed in range(10)]
        second = [choose_fallback_scale(random.Random(seed)) for seed in range(10)]
        assert first == second

    def test_every_scale_reachable(self):
        rng = random.Random(0)
        chosen = {choose_fallback_scale(rng) for _ in range(100)}
        assert chosen == set(FallbackScale)

    def test_scale_pitches(self):
        assert fallback_pitches(FallbackScale.MAJOR) == [60, 62, 64, 65, 67, 69, 71, 72]
        assert fallback_pitches(FallbackScale.NATURAL_MINOR)[2] == 63
        assert fallback_pitches(FallbackScale.BLUES)[1] == 61


# ============================================================================
# Converter
# ============================================================================

class TestConverter:

    def test_converts_audio(self, sine_wav):
        result = AudioToMidiConverter(rng=random.Random(1)).convert(sine_wav)

        assert result.status is ConversionStatus.CONVERTED
        assert result.filename == "sine_converted.mid"
        assert result.pitches == (68,) * 8
        pm = pretty_midi.PrettyMIDI(io.BytesIO(result.midi_bytes))
        assert [n.pitch for n in pm.instruments[0].notes] == [68] * 8

    def test_silence_becomes_triad(self, silent_wav):
        result = AudioToMidiConverter().convert(silent_wav)
        assert result.status is ConversionStatus.CONVERTED
        assert result.pitches == (60, 64, 67)

    def test_undecodable_audio_falls_back(self, broken_wav):
        result = AudioToMidiConverter(rng=random.Random(3)).convert(broken_wav)

        assert result.status is ConversionStatus.FALLBACK
        assert result.filename == "broken_fallback.mid"
        assert list(result.pitches) in [fallback_pitches(s) for s in FallbackScale]
        pm = pretty_midi.PrettyMIDI(io.BytesIO(result.midi_bytes))
        assert len(pm.instruments[0].notes) == 8

    def test_missing_file_falls_back(self, tmp_path):
        result = AudioToMidiConverter().convert(str(tmp_path / "nowhere.wav"))
        assert result.status is ConversionStatus.FALLBACK
        assert result.filename == "nowhere_fallback.mid"

    def test_fallback_is_seedable(self, broken_wav):
        first = AudioToMidiConverter(rng=random.Random(11)).convert(broken_wav)
        second = AudioToMidiConverter(rng=random.Random(11)).convert(broken_wav)
        assert first.midi_bytes == second.midi_bytes
        assert first.pitches == second.pitches

    def test_seeded_conversion_is_repeatable(self, sine_wav):
        first = AudioToMidiConverter(rng=random.Random(5)).convert(sine_wav)
        second = AudioToMidiConverter(rng=random.Random(5)).convert(sine_wav)
        assert first.midi_bytes == second.midi_bytes
        assert first.confidence == second.confidence

    def test_confidence_range(self, sine_wav):
        result = AudioToMidiConverter().convert(sine_wav)
        assert 0.85 <= result.confidence < 0.95
        assert result.processing_time >= 0.0

    def test_progress_reports_every_stage(self, sine_wav):
        reports = []
        AudioToMidiConverter().convert(sine_wav, progress=reports.append)
        assert [r.stage for r in reports] == [
            "uploading", "processing", "transcribing", "generating", "complete",
        ]
        assert [r.progress for r in reports] == [20, 40, 70, 90, 100]

    def test_repeated_conversion_uses_cache(self, sine_wav):
        loader = CountingLoader()
        converter = AudioToMidiConverter(loader=loader)
        first = converter.convert(sine_wav)
        second = converter.convert(sine_wav)

        assert loader.calls == 1
        assert first is second

    def test_cache_size_from_config(self):
        converter = AudioToMidiConverter(ConversionConfig(cache_size=3))
        assert converter.cache.max_size == 3


class TestConverterCancellation:

    def test_cancelled_before_start(self, sine_wav):
        loader = CountingLoader()
        converter = AudioToMidiConverter(loader=loader)
        token = CancellationToken()
        token.cancel()

        result = converter.convert(sine_wav, token=token)

        assert result.status is ConversionStatus.CANCELLED
        assert result.is_cancelled and not result.ok
        assert result.midi_bytes == b""
        assert loader.calls == 0

    def test_cancel_from_progress_callback(self, sine_wav):
        token = CancellationToken()
        reports = []

        def on_progress(report):
            reports.append(report.stage)
            if report.stage == "processing":
                token.cancel()

        result = AudioToMidiConverter().convert(sine_wav, token=token, progress=on_progress)

        assert result.is_cancelled
        assert reports == ["uploading", "processing"]

    def test_cancelled_result_not_cached(self, sine_wav):
        converter = AudioToMidiConverter()
        token = CancellationToken()
        token.cancel()

        assert converter.convert(sine_wav, token=token).is_cancelled
        assert len(converter.cache) == 0
        assert converter.convert(sine_wav).status is ConversionStatus.CONVERTED
        assert len(converter.cache) == 1

    def test_cancel_during_failed_decode_is_not_fallback(self, broken_wav):
        token = CancellationToken()

        class CancellingLoader(AudioLoader):
            def load(self, path):
                token.cancel()
                raise AudioDecodeError("unreadable", file_path=path)

        result = AudioToMidiConverter(loader=CancellingLoader()).convert(broken_wav, token=token)
        assert result.status is ConversionStatus.CANCELLED
        assert result.filename == ""

    def test_cancel_after_decode(self, sine_wav):
        token = CancellationToken()

        class CancellingLoader(AudioLoader):
            def load(self, path):
                audio = super().load(path)
                token.cancel()
                return audio

        result = AudioToMidiConverter(loader=CancellingLoader()).convert(sine_wav, token=token)
        assert result.is_cancelled

    def test_cancel_while_joined_to_another_conversion(self, sine_wav):
        release = threading.Event()

        class BlockingLoader(AudioLoader):
            def load(self, path):
                release.wait(5)
                return super().load(path)

        converter = AudioToMidiConverter(
            loader=BlockingLoader(),
            cache=ConversionCache(should_store=lambda r: r.ok, poll_interval=0.01),
        )
        key = AudioFingerprint.from_path(sine_wav)
        results = {}

        owner = threading.Thread(target=lambda: results.setdefault("owner", converter.convert(sine_wav)))
        owner.start()
        wait_for(lambda: converter.cache.in_flight(key))

        token = CancellationToken()
        waiter = threading.Thread(
            target=lambda: results.setdefault("waiter", converter.convert(sine_wav, token=token))
        )
        waiter.start()
        wait_for(lambda: converter.cache.stats()["shared"] == 1)

        token.cancel()
        waiter.join(2)
        assert not waiter.is_alive()
        assert results["waiter"].status is ConversionStatus.CANCELLED

        release.set()
        owner.join(5)
        assert results["owner"].status is ConversionStatus.CONVERTED
        assert key in converter.cache
