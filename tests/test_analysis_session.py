import asyncio
import threading

import pytest

import services.analysis_session as analysis_session_module
from dal.history_dal import KeyValueDAL
from fakes import PNEUMONIA_PAYLOAD, FakeOpenAI, StubClassifier, make_result, png_bytes
from models.errors import AnalysisFailedError, InvalidTransitionError, UploadValidationError
from models.session_models import Idle, Phase, UploadedImage
from services.analysis_session import (
    DECODE_FAILED_MESSAGE,
    RUN_FAILED_MESSAGE,
    SAVE_FAILED_MESSAGE,
    AnalysisSession,
)
from services.history_store import ResultStore
from services.openai.xray_classifier import ANALYSIS_FAILED_MESSAGE, XrayClassifier
from utils.media_validation import INVALID_TYPE_MESSAGE, TOO_LARGE_MESSAGE

FIVE_MIB = 5 * 1024 * 1024


def make_session(store, classifier=None, **kwargs):
    return AnalysisSession(classifier or StubClassifier(), store, enhancement_delay=0, **kwargs)


def xray(size: int = 2 * 1024 * 1024, content_type: str = "image/png") -> UploadedImage:
    return UploadedImage(filename="xray.png", content_type=content_type, data=b"\x89PNG" + b"\0" * (size - 4))


@pytest.mark.asyncio
@pytest.mark.parametrize("content_type", ["text/plain", "application/pdf", "", "video/mp4"])
async def test_non_image_leaves_state_and_sets_error(store, content_type):
    session = make_session(store)

    with pytest.raises(UploadValidationError):
        await session.process_file(UploadedImage("notes", content_type, b"hello"))

    assert isinstance(session.state, Idle)
    assert session.error == INVALID_TYPE_MESSAGE


@pytest.mark.asyncio
async def test_invalid_reupload_keeps_existing_preview(store):
    session = make_session(store)
    await session.process_file(xray(1024))
    before = session.state

    with pytest.raises(UploadValidationError):
        await session.process_file(UploadedImage("notes.txt", "text/plain", b"hello"))

    assert session.state is before
    assert session.preview is not None
    assert session.error == INVALID_TYPE_MESSAGE


@pytest.mark.asyncio
@pytest.mark.parametrize("size", [FIVE_MIB, FIVE_MIB + 1])
async def test_oversized_upload_is_rejected(store, size):
    session = make_session(store)

    with pytest.raises(UploadValidationError) as excinfo:
        await session.process_file(xray(size))

    assert excinfo.value.status_code == 413
    assert session.state.phase is Phase.IDLE
    assert session.error == TOO_LARGE_MESSAGE


@pytest.mark.asyncio
async def test_upload_under_limit_produces_preview(store):
    session = make_session(store)

    await session.process_file(xray(FIVE_MIB - 1, "image/jpeg"))

    assert session.state.phase is Phase.UPLOADING
    assert session.preview.startswith("data:image/jpeg;base64,")
    assert session.error is None


@pytest.mark.asyncio
async def test_empty_upload_fails_while_uploading(store):
    session = make_session(store)

    await session.process_file(UploadedImage("blank.png", "image/png", b""))

    assert session.state.phase is Phase.ERROR
    assert session.error == DECODE_FAILED_MESSAGE


@pytest.mark.asyncio
async def test_analysis_passes_through_enhancing(store):
    session = make_session(store)
    seen = []
    session.subscribe(lambda state: seen.append((state.phase, state.enhanced)))

    await session.process_file(xray())
    await session.start_analysis()

    assert seen == [
        (Phase.UPLOADING, False),
        (Phase.UPLOADING, False),
        (Phase.ENHANCING, False),
        (Phase.ENHANCING, True),
        (Phase.ANALYZING, True),
        (Phase.COMPLETE, True),
    ]


@pytest.mark.asyncio
async def test_enhancement_delay_is_awaited(store):
    delays = []

    async def fake_sleep(seconds):
        delays.append(seconds)

    session = AnalysisSession(StubClassifier(), store, enhancement_delay=1.5, sleep=fake_sleep)
    await session.process_file(xray())
    await session.start_analysis()

    assert delays == [1.5]


@pytest.mark.asyncio
async def test_pneumonia_scenario_is_stored(store):
    await store.append(make_result("older"), "data:image/png;base64,AA==")
    classifier = StubClassifier(PNEUMONIA_PAYLOAD)
    session = make_session(store, classifier)

    await session.process_file(xray())
    preview = session.preview
    await session.start_analysis()

    assert session.state.phase is Phase.COMPLETE
    assert len(store) == 2
    newest = store.list()[0]
    assert newest.imageUrl == preview
    assert classifier.calls == [preview]
    assert newest.findings == ("Right lower lobe consolidation",)
    assert newest.confidence == 88
    assert newest.id != "older"
    assert session.result.id == newest.id


@pytest.mark.asyncio
async def test_classifier_failure_moves_to_error(store):
    client = FakeOpenAI()
    client.responses.push(RuntimeError("connection reset"))
    session = make_session(store, XrayClassifier(client))

    await session.process_file(xray())
    await session.start_analysis()

    assert session.state.phase is Phase.ERROR
    assert session.error == ANALYSIS_FAILED_MESSAGE
    assert session.state.enhanced is True
    assert len(store) == 0


@pytest.mark.asyncio
async def test_persistence_failure_moves_to_error(db_initializer):
    class BrokenDAL(KeyValueDAL):
        async def put(self, key, value):
            raise OSError("disk full")

    store = ResultStore(BrokenDAL(db_initializer))
    session = make_session(store)

    await session.process_file(xray())
    await session.start_analysis()

    assert session.state.phase is Phase.ERROR
    assert session.error == SAVE_FAILED_MESSAGE


@pytest.mark.asyncio
async def test_reset_discards_late_result(store):
    gate = asyncio.Event()
    session = make_session(store, StubClassifier(gate=gate))
    await session.process_file(xray())

    task = asyncio.create_task(session.start_analysis())
    await asyncio.sleep(0)
    assert session.state.phase is Phase.ANALYZING

    session.reset()
    gate.set()
    await task

    assert isinstance(session.state, Idle)
    assert session.result is None
    assert len(store) == 0


@pytest.mark.asyncio
async def test_upload_rejected_while_analysis_in_flight(store):
    gate = asyncio.Event()
    session = make_session(store, StubClassifier(gate=gate))
    await session.process_file(xray())
    task = asyncio.create_task(session.start_analysis())
    await asyncio.sleep(0)

    with pytest.raises(InvalidTransitionError):
        await session.process_file(xray(1024))
    with pytest.raises(InvalidTransitionError):
        session.begin_analysis()

    gate.set()
    await task
    assert session.state.phase is Phase.COMPLETE
    assert len(store) == 1


@pytest.mark.asyncio
async def test_analysis_requires_preview(store):
    session = make_session(store)

    with pytest.raises(InvalidTransitionError):
        await session.start_analysis()


@pytest.mark.asyncio
async def test_terminal_states_need_reset_before_upload(store):
    session = make_session(store, StubClassifier(error=AnalysisFailedError(ANALYSIS_FAILED_MESSAGE)))
    await session.process_file(xray())
    await session.start_analysis()
    assert session.state.phase is Phase.ERROR

    with pytest.raises(InvalidTransitionError):
        await session.process_file(xray())

    session.reset()
    await session.process_file(xray())
    assert session.state.phase is Phase.UPLOADING


@pytest.mark.asyncio
async def test_reset_clears_everything(store):
    session = make_session(store)
    await session.process_file(xray())
    await session.start_analysis()

    session.reset()

    assert session.snapshot() == {
        "state": "IDLE",
        "enhanced": False,
        "filename": None,
        "preview": None,
        "error": None,
        "result": None,
    }


@pytest.mark.asyncio
async def test_on_complete_receives_result(store):
    received = []
    session = make_session(store, on_complete=received.append)
    await session.process_file(UploadedImage("chest.png", "image/png", png_bytes()))

    await session.start_analysis()

    assert received == [session.result]


def gated_sleep(gate: asyncio.Event):
    async def sleep(seconds):
        await gate.wait()

    return sleep


@pytest.mark.asyncio
async def test_failing_completion_callback_keeps_complete(store):
    def broken(result):
        raise RuntimeError("listener broke")

    session = make_session(store, on_complete=broken)
    session.subscribe(broken)
    await session.process_file(xray())

    await session.start_analysis()

    assert session.state.phase is Phase.COMPLETE
    assert session.error is None
    assert len(store) == 1


@pytest.mark.asyncio
async def test_unexpected_failure_hides_raw_detail(store):
    session = make_session(store, StubClassifier(error=RuntimeError("socket exploded at 10.0.0.7")))
    await session.process_file(xray())

    await session.start_analysis()

    assert session.state.phase is Phase.ERROR
    assert session.error == RUN_FAILED_MESSAGE
    assert len(store) == 0


@pytest.mark.asyncio
async def test_upload_rejected_while_enhancing(store):
    gate = asyncio.Event()
    session = AnalysisSession(StubClassifier(), store, enhancement_delay=1.5, sleep=gated_sleep(gate))
    await session.process_file(xray())
    task = asyncio.create_task(session.start_analysis())
    await asyncio.sleep(0)
    assert session.state.phase is Phase.ENHANCING
    assert session.enhanced is False

    with pytest.raises(InvalidTransitionError):
        await session.process_file(xray(1024))

    gate.set()
    await task
    assert session.state.phase is Phase.COMPLETE


@pytest.mark.asyncio
async def test_reset_while_enhancing_skips_classifier(store):
    gate = asyncio.Event()
    classifier = StubClassifier()
    session = AnalysisSession(classifier, store, enhancement_delay=1.5, sleep=gated_sleep(gate))
    await session.process_file(xray())
    task = asyncio.create_task(session.start_analysis())
    await asyncio.sleep(0)
    assert session.state.phase is Phase.ENHANCING

    session.reset()
    gate.set()
    await task

    assert isinstance(session.state, Idle)
    assert classifier.calls == []
    assert len(store) == 0


@pytest.mark.asyncio
async def test_decode_in_progress_blocks_upload_and_reset_drops_preview(store, monkeypatch):
    release = threading.Event()
    encode = analysis_session_module.to_data_url

    def slow_encode(data, content_type):
        release.wait(5)
        return encode(data, content_type)

    monkeypatch.setattr(analysis_session_module, "to_data_url", slow_encode)
    session = make_session(store)
    task = asyncio.create_task(session.process_file(xray(1024)))
    await asyncio.sleep(0)
    assert session.state.phase is Phase.UPLOADING
    assert session.preview is None

    with pytest.raises(InvalidTransitionError):
        await session.process_file(xray(2048))

    session.reset()
    release.set()
    await task

    assert isinstance(session.state, Idle)
    assert session.preview is None
