"""Batch scheduler and ingestion entry tests (no HTTP, no database)."""

import asyncio
from io import BytesIO

import pytest
from PIL import Image

from conftest import FakePlacement, ListRecorder, make_image, make_oversized_image
from eventfold.services.ingest_service import (
    BatchScheduler,
    ManifestEntry,
    NoDataReceived,
    UploadItem,
    ingest_uploads,
    record_manifest,
)
from eventfold.services.placement import PlacementFailure
from eventfold.utils.image import TranscodeResult

SMALL = make_image(32, 32)


def _items(n: int, data: bytes = SMALL) -> list[UploadItem]:
    return [UploadItem(index=i, filename=f"sheet_{i}.png", data=data) for i in range(n)]


def _run(scheduler: BatchScheduler, items, album_id: str = "alb_test"):
    return asyncio.run(scheduler.run(album_id, items))


@pytest.mark.parametrize("n", [0, 1, 5, 6, 37, 100])
def test_one_record_per_item(n):
    placement, recorder = FakePlacement(), ListRecorder()
    scheduler = BatchScheduler(placement, recorder)

    results = _run(scheduler, _items(n))

    assert len(results) == n
    assert len(recorder.records) == n
    assert placement.calls == n


def test_order_follows_input_not_completion():
    n = 13
    # distinct, scrambled latencies: index i finishes after ((7 * i) % 13) * 3ms
    placement = FakePlacement(delays={i: ((7 * i) % n) * 0.003 for i in range(n)})
    scheduler = BatchScheduler(placement, ListRecorder())

    results = _run(scheduler, _items(n))

    assert [r.order_index for r in results] == list(range(n))
    assert [r.file_path for r in results] == [f"https://media.test/alb_test/{i}" for i in range(n)]
    # completions inside a window really were out of order
    ends = [i for kind, i in placement.events if kind == "end"]
    assert ends != sorted(ends)


def test_twelve_items_run_as_three_sequential_windows():
    placement = FakePlacement(delays={i: (5 - i % 5) * 0.005 for i in range(12)})
    scheduler = BatchScheduler(placement, ListRecorder())

    assert [len(w) for w in scheduler.windows(_items(12))] == [5, 5, 2]
    _run(scheduler, _items(12))

    position = {event: pos for pos, event in enumerate(placement.events)}
    windows = [range(0, 5), range(5, 10), range(10, 12)]
    for earlier, later in zip(windows, windows[1:]):
        last_end = max(position[("end", i)] for i in earlier)
        first_start = min(position[("start", i)] for i in later)
        assert first_start > last_end, "a window started before the previous one finished"

    # all items of one window are in flight together
    first_window_starts = [position[("start", i)] for i in windows[0]]
    first_window_ends = [position[("end", i)] for i in windows[0]]
    assert max(first_window_starts) < min(first_window_ends)


def test_window_size_is_configurable():
    scheduler = BatchScheduler(FakePlacement(), ListRecorder(), window_size=2)

    assert [len(w) for w in scheduler.windows(_items(5))] == [2, 2, 1]
    with pytest.raises(ValueError):
        BatchScheduler(FakePlacement(), ListRecorder(), window_size=0)


def test_small_items_are_placed_byte_identical():
    placement = FakePlacement()
    calls = []
    scheduler = BatchScheduler(placement, ListRecorder(), transcoder=lambda data: calls.append(data))

    _run(scheduler, _items(3))

    assert calls == [], "transcoder must not run at or below the threshold"
    assert all(r.data == SMALL for r in placement.requests)
    assert all(r.extension == "" for r in placement.requests)


def test_item_exactly_at_threshold_is_not_transcoded():
    data = b"x" * 64
    placement = FakePlacement()
    scheduler = BatchScheduler(placement, ListRecorder(), transcode_threshold=64)

    _run(scheduler, [UploadItem(index=0, filename="edge.jpg", data=data)])

    assert placement.requests[0].data is data


def test_oversized_item_is_bounded_to_3000px():
    big = make_oversized_image()
    assert len(big) > 5 * 1024 * 1024
    placement = FakePlacement()
    scheduler = BatchScheduler(placement, ListRecorder())

    _run(scheduler, [UploadItem(index=0, filename="panorama.bmp", data=big)])

    placed = placement.requests[0]
    img = Image.open(BytesIO(placed.data))
    assert img.width <= 3000 and img.height <= 3000
    assert placed.extension == ".jpg"


def test_throwing_transcoder_falls_back_to_original():
    big = make_oversized_image()

    def broken(data):
        raise MemoryError("decoder exploded")

    placement = FakePlacement()
    recorder = ListRecorder()
    scheduler = BatchScheduler(placement, recorder, transcoder=broken)

    results = _run(scheduler, [UploadItem(index=0, filename="panorama.bmp", data=big)])

    assert len(results) == 1
    assert placement.requests[0].data is big
    assert placement.requests[0].extension == ""


def test_failed_transcode_result_falls_back_to_original():
    big = b"\x00" * 128
    placement = FakePlacement()
    scheduler = BatchScheduler(
        placement,
        ListRecorder(),
        transcoder=lambda data: TranscodeResult(data=data, ok=False, error="unsupported"),
        transcode_threshold=16,
    )

    _run(scheduler, [UploadItem(index=0, filename="raw.cr2", data=big)])

    assert placement.requests[0].data is big


def test_failure_on_third_of_seven_aborts_batch_but_keeps_first_window():
    placement = FakePlacement(fail_on_call=3)
    recorder = ListRecorder()
    scheduler = BatchScheduler(placement, recorder)

    with pytest.raises(PlacementFailure, match="#3"):
        _run(scheduler, _items(7))

    recorded = sorted(r.order_index for r in recorder.records)
    assert recorded == [0, 1, 3, 4], f"first window should settle fully, got {recorded}"
    started = {i for kind, i in placement.events if kind == "start"}
    assert started == {0, 1, 2, 3, 4}, "second window must never start"


def test_placement_timeout_is_a_placement_failure():
    placement = FakePlacement(delays={0: 1.0})
    scheduler = BatchScheduler(placement, ListRecorder(), placement_timeout=0.05)

    with pytest.raises(PlacementFailure, match="timed out"):
        _run(scheduler, _items(1))


def test_records_carry_album_type_and_index():
    recorder = ListRecorder()
    scheduler = BatchScheduler(FakePlacement(), recorder)
    items = [
        UploadItem(index=0, filename="front.jpg", data=SMALL, file_type="cover_front"),
        UploadItem(index=1, filename="back.jpg", data=SMALL, file_type="cover_back"),
        UploadItem(index=2, filename="s1.jpg", data=SMALL),
    ]

    _run(scheduler, items, album_id="alb_rec")

    assert [(r.album_id, r.file_type, r.order_index) for r in recorder.records] == [
        ("alb_rec", "cover_front", 0),
        ("alb_rec", "cover_back", 1),
        ("alb_rec", "sheet", 2),
    ]


def test_ingest_uploads_requires_items():
    scheduler = BatchScheduler(FakePlacement(), ListRecorder())

    with pytest.raises(NoDataReceived):
        asyncio.run(ingest_uploads("alb_test", [], scheduler))


def test_record_manifest_keeps_input_order_and_skips_placement():
    recorder = ListRecorder()
    entries = [
        ManifestEntry(file_path="https://cdn.test/b.jpg", file_type="cover_back", order_index=1),
        ManifestEntry(file_path="https://cdn.test/a.jpg", file_type="cover_front", order_index=0),
        ManifestEntry(file_path="https://cdn.test/c.jpg"),
    ]

    results = record_manifest("alb_m", entries, recorder)

    assert [r.file_path for r in results] == [e.file_path for e in entries]
    assert results[2].file_type == "sheet"
    assert results[2].order_index == 0
