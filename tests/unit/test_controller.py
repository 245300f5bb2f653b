"""Unit tests for the ViewController state machine and streaming updates."""

import asyncio

import pytest_check as check

from quantscholar.errors import ChatError, ExtractionError
from quantscholar.gateway.prompts import ANALYSIS_FAILED_NOTICE, CHAT_ERROR_TEXT
from quantscholar.models.conversation import MessageRole
from quantscholar.models.schemas import SessionSnapshot, ViewState
from quantscholar.session.controller import READ_FAILED_NOTICE, ViewController
from tests.fakes import FakeGateway, FakeUpload, wait_until


def record(controller: ViewController) -> list[SessionSnapshot]:
    snapshots: list[SessionSnapshot] = []
    controller.subscribe(snapshots.append)
    return snapshots


def transitions(snapshots: list[SessionSnapshot]) -> list[ViewState]:
    states: list[ViewState] = []
    for snapshot in snapshots:
        if not states or states[-1] is not snapshot.state:
            states.append(snapshot.state)
    return states


async def ready(controller: ViewController, pdf_bytes: bytes) -> None:
    assert await controller.select_file(FakeUpload(pdf_bytes))


class TestSelectFile:
    """Upload -> analyzing -> ready/upload transitions."""

    async def test_successful_analysis_reaches_ready(
        self, controller: ViewController, fake_gateway: FakeGateway, pdf_bytes: bytes
    ) -> None:
        """Scenario A: a good paper ends in READY with its analysis."""
        snapshots = record(controller)

        result = await controller.select_file(FakeUpload(pdf_bytes))

        snapshot = controller.snapshot()
        check.is_true(result)
        check.equal(snapshot.state, ViewState.READY)
        check.equal(snapshot.analysis.title, "Auctions with Behavioral Bidders")
        check.is_true(len(snapshot.analysis.critique.weaknesses) > 0)
        check.equal(snapshot.file_name, "paper.pdf")
        check.is_true(snapshot.chat_ready)
        check.equal(transitions(snapshots), [ViewState.ANALYZING, ViewState.READY])

    async def test_both_calls_share_the_payload(
        self, controller: ViewController, fake_gateway: FakeGateway, pdf_bytes: bytes
    ) -> None:
        """Extraction and chat are started once each with the same document."""
        await controller.select_file(FakeUpload(pdf_bytes))

        check.equal(len(fake_gateway.extract_calls), 1)
        check.equal(len(fake_gateway.opened), 1)
        check.equal(fake_gateway.extract_calls[0].content, pdf_bytes)
        check.equal(fake_gateway.extract_calls[0].media_type, "application/pdf")

    async def test_chat_available_before_extraction_finishes(
        self, controller: ViewController, fake_gateway: FakeGateway, pdf_bytes: bytes
    ) -> None:
        """The chat handle is stored while the analysis is still running."""
        fake_gateway.extraction_gate = asyncio.Event()
        task = asyncio.create_task(controller.select_file(FakeUpload(pdf_bytes)))

        await wait_until(lambda: controller.chat_session is not None)
        check.equal(controller.state, ViewState.ANALYZING)
        check.is_true(controller.snapshot().chat_ready)
        check.is_none(controller.analysis)

        fake_gateway.extraction_gate.set()
        assert await task
        assert controller.state is ViewState.READY

    async def test_extraction_failure_returns_to_upload(
        self, controller: ViewController, fake_gateway: FakeGateway, pdf_bytes: bytes
    ) -> None:
        """Scenario B: extraction fails, the chat is discarded, a notice is raised."""
        fake_gateway.extraction_error = ExtractionError("No response from model")
        snapshots = record(controller)

        result = await controller.select_file(FakeUpload(pdf_bytes))

        snapshot = controller.snapshot()
        check.is_false(result)
        check.equal(snapshot.state, ViewState.UPLOAD)
        check.is_none(snapshot.analysis)
        check.is_false(snapshot.chat_ready)
        check.is_none(controller.chat_session)
        check.equal(len(fake_gateway.opened), 1)
        check.equal(snapshot.notice, ANALYSIS_FAILED_NOTICE)
        check.equal(transitions(snapshots), [ViewState.ANALYZING, ViewState.UPLOAD])

    async def test_unexpected_extraction_error_never_leaves_analyzing(
        self, controller: ViewController, fake_gateway: FakeGateway, pdf_bytes: bytes
    ) -> None:
        """Any exception from extraction still ends the analysis."""
        fake_gateway.extraction_error = RuntimeError("boom")

        assert not await controller.select_file(FakeUpload(pdf_bytes))
        assert controller.state is ViewState.UPLOAD
        assert controller.notice == ANALYSIS_FAILED_NOTICE

    async def test_read_failure_returns_to_upload(
        self, controller: ViewController, fake_gateway: FakeGateway
    ) -> None:
        """An unreadable file never reaches the gateway."""
        upload = FakeUpload(b"", error=PermissionError("denied"))

        result = await controller.select_file(upload)

        check.is_false(result)
        check.equal(controller.state, ViewState.UPLOAD)
        check.equal(controller.notice, READ_FAILED_NOTICE)
        check.equal(fake_gateway.extract_calls, [])
        check.equal(fake_gateway.opened, [])

    async def test_chat_open_failure_aborts_analysis(
        self, controller: ViewController, fake_gateway: FakeGateway, pdf_bytes: bytes
    ) -> None:
        """A chat that cannot be built fails the upload as a whole."""
        fake_gateway.open_error = ChatError("bad payload")

        result = await controller.select_file(FakeUpload(pdf_bytes))
        await asyncio.sleep(0)

        check.is_false(result)
        check.equal(controller.state, ViewState.UPLOAD)
        check.equal(controller.notice, ANALYSIS_FAILED_NOTICE)
        check.is_none(controller.analysis)

    async def test_selection_ignored_outside_upload(
        self, controller: ViewController, fake_gateway: FakeGateway, pdf_bytes: bytes
    ) -> None:
        """A second file while READY does not restart the analysis."""
        await ready(controller, pdf_bytes)

        assert not await controller.select_file(FakeUpload(b"%PDF-other"))
        assert len(fake_gateway.extract_calls) == 1
        assert controller.state is ViewState.READY

    async def test_resubmit_after_failure(
        self, controller: ViewController, fake_gateway: FakeGateway, pdf_bytes: bytes
    ) -> None:
        """No automatic retry; the user resubmits and the notice clears."""
        fake_gateway.extraction_error = ExtractionError("bad json")
        await controller.select_file(FakeUpload(pdf_bytes))
        check.equal(len(fake_gateway.extract_calls), 1)

        fake_gateway.extraction_error = None
        assert await controller.select_file(FakeUpload(pdf_bytes))

        check.equal(len(fake_gateway.extract_calls), 2)
        check.is_none(controller.notice)

    async def test_dismiss_notice(
        self, controller: ViewController, fake_gateway: FakeGateway, pdf_bytes: bytes
    ) -> None:
        fake_gateway.extraction_error = ExtractionError("bad json")
        await controller.select_file(FakeUpload(pdf_bytes))

        controller.dismiss_notice()

        assert controller.snapshot().notice is None


class TestReset:
    """Reset from any state."""

    async def test_reset_from_ready_clears_everything(
        self, controller: ViewController, pdf_bytes: bytes
    ) -> None:
        """Reset is idempotent and always yields an empty session."""
        await ready(controller, pdf_bytes)
        await controller.submit_user_message("Explain Proposition 1")

        for _ in range(2):
            controller.reset()
            snapshot = controller.snapshot()
            check.equal(snapshot.state, ViewState.UPLOAD)
            check.is_none(snapshot.analysis)
            check.equal(snapshot.messages, [])
            check.is_false(snapshot.chat_ready)
            check.is_none(snapshot.file_name)

    async def test_late_extraction_after_reset_is_ignored(
        self, controller: ViewController, fake_gateway: FakeGateway, pdf_bytes: bytes
    ) -> None:
        """An analysis that lands after reset does not resurrect the session."""
        fake_gateway.extraction_gate = asyncio.Event()
        task = asyncio.create_task(controller.select_file(FakeUpload(pdf_bytes)))
        await wait_until(lambda: controller.chat_session is not None)

        controller.reset()
        fake_gateway.extraction_gate.set()

        check.is_false(await task)
        check.equal(controller.state, ViewState.UPLOAD)
        check.is_none(controller.analysis)
        check.is_none(controller.chat_session)

    async def test_late_extraction_failure_after_reset_is_ignored(
        self, controller: ViewController, fake_gateway: FakeGateway, pdf_bytes: bytes
    ) -> None:
        """A failure that lands after reset raises no notice."""
        fake_gateway.extraction_gate = asyncio.Event()
        fake_gateway.extraction_error = ExtractionError("late")
        task = asyncio.create_task(controller.select_file(FakeUpload(pdf_bytes)))
        await wait_until(lambda: controller.chat_session is not None)

        controller.reset()
        fake_gateway.extraction_gate.set()
        await task

        assert controller.notice is None

    async def test_late_fragments_after_reset_are_ignored(
        self, controller: ViewController, fake_gateway: FakeGateway, pdf_bytes: bytes
    ) -> None:
        """A reply still streaming during reset never reaches the new session."""
        await ready(controller, pdf_bytes)
        fake_gateway.stream_gate = asyncio.Event()
        task = asyncio.create_task(controller.submit_user_message("Explain Proposition 1"))
        await wait_until(lambda: controller.conversation.is_streaming)

        controller.reset()
        fake_gateway.stream_gate.set()
        await task

        check.equal(controller.snapshot().messages, [])
        check.is_false(controller.conversation.is_streaming)


class TestSubmitUserMessage:
    """Streaming conversation updates."""

    async def test_streamed_reply(
        self, controller: ViewController, pdf_bytes: bytes
    ) -> None:
        """Scenario C: user message, placeholder, then the concatenated reply."""
        await ready(controller, pdf_bytes)
        snapshots = record(controller)

        accepted = await controller.submit_user_message("Explain Proposition 1")

        user, reply = controller.snapshot().messages
        check.is_true(accepted)
        check.equal(user.role, MessageRole.USER)
        check.equal(user.text, "Explain Proposition 1")
        check.equal(reply.role, MessageRole.ASSISTANT)
        check.equal(reply.text, "The intuition is that...")
        check.is_false(reply.is_streaming)
        check.is_false(reply.is_error)

        # First notification already shows both messages with an empty placeholder
        first = snapshots[0].messages
        check.equal([m.role for m in first], [MessageRole.USER, MessageRole.ASSISTANT])
        check.equal(first[1].text, "")
        check.is_true(first[1].is_streaming)

    async def test_streaming_flag_clears_exactly_once(
        self, controller: ViewController, pdf_bytes: bytes
    ) -> None:
        """is_streaming stays set through every fragment and clears at the end."""
        await ready(controller, pdf_bytes)
        snapshots = record(controller)

        await controller.submit_user_message("Explain Proposition 1")

        flags = [s.messages[-1].is_streaming for s in snapshots]
        texts = [s.messages[-1].text for s in snapshots]
        check.equal(flags.count(False), 1)
        check.is_false(flags[-1])
        check.is_true(all(flags[:-1]))
        check.is_in("The intuition", texts)
        check.equal(texts[-1], "The intuition is that...")

    async def test_mid_stream_failure_replaces_text(
        self, controller: ViewController, fake_gateway: FakeGateway, pdf_bytes: bytes
    ) -> None:
        """Scenario D: partial output is replaced by the fixed error text."""
        await ready(controller, pdf_bytes)
        fake_gateway.fragments = ["Partial an"]
        fake_gateway.chat_error = ChatError("stream reset")

        assert await controller.submit_user_message("Explain Proposition 1")

        reply = controller.snapshot().messages[-1]
        check.equal(reply.text, CHAT_ERROR_TEXT)
        check.is_false(reply.is_streaming)
        check.is_true(reply.is_error)
        check.equal(controller.state, ViewState.READY)

    async def test_chat_error_is_scoped_to_one_message(
        self, controller: ViewController, fake_gateway: FakeGateway, pdf_bytes: bytes
    ) -> None:
        """After a failed reply the conversation continues normally."""
        await ready(controller, pdf_bytes)
        fake_gateway.chat_error = ChatError("offline")
        await controller.submit_user_message("First")

        fake_gateway.chat_error = None
        await controller.submit_user_message("Second")

        messages = controller.snapshot().messages
        check.equal(len(messages), 4)
        check.is_true(messages[1].is_error)
        check.equal(messages[3].text, "The intuition is that...")

    async def test_submit_while_streaming_is_dropped(
        self, controller: ViewController, fake_gateway: FakeGateway, pdf_bytes: bytes
    ) -> None:
        """A second submit during streaming adds no messages."""
        await ready(controller, pdf_bytes)
        fake_gateway.stream_gate = asyncio.Event()
        first = asyncio.create_task(controller.submit_user_message("First"))
        await wait_until(lambda: controller.conversation.is_streaming)

        check.is_false(controller.can_submit("Second"))
        check.is_false(await controller.submit_user_message("Second"))
        check.equal(len(controller.conversation), 2)

        fake_gateway.stream_gate.set()
        assert await first
        assert fake_gateway.sent == ["First"]
        assert len(controller.conversation) == 2

    async def test_blank_message_is_dropped(
        self, controller: ViewController, fake_gateway: FakeGateway, pdf_bytes: bytes
    ) -> None:
        await ready(controller, pdf_bytes)

        assert not await controller.submit_user_message("   ")
        assert len(controller.conversation) == 0
        assert fake_gateway.sent == []

    async def test_message_without_chat_is_dropped(
        self, controller: ViewController, fake_gateway: FakeGateway
    ) -> None:
        """No chat handle, no message."""
        assert not await controller.submit_user_message("Hello")
        assert len(controller.conversation) == 0

    async def test_message_text_is_trimmed(
        self, controller: ViewController, fake_gateway: FakeGateway, pdf_bytes: bytes
    ) -> None:
        await ready(controller, pdf_bytes)

        await controller.submit_user_message("  Explain Proposition 1 \n")

        assert fake_gateway.sent == ["Explain Proposition 1"]
        assert controller.snapshot().messages[0].text == "Explain Proposition 1"


class TestSubscribe:
    """Change notifications."""

    async def test_unsubscribe_stops_notifications(
        self, controller: ViewController, pdf_bytes: bytes
    ) -> None:
        snapshots: list[SessionSnapshot] = []
        unsubscribe = controller.subscribe(snapshots.append)
        unsubscribe()

        await ready(controller, pdf_bytes)

        assert snapshots == []

    async def test_failing_listener_does_not_break_session(
        self, controller: ViewController, pdf_bytes: bytes
    ) -> None:
        """A broken renderer is logged; other listeners still run."""

        def broken(_: SessionSnapshot) -> None:
            raise RuntimeError("render failed")

        controller.subscribe(broken)
        snapshots = record(controller)

        await ready(controller, pdf_bytes)

        assert snapshots[-1].state is ViewState.READY


class TestBeginUserMessage:
    """Claiming an exchange separately from streaming its reply."""

    async def test_claim_refuses_a_second_question(
        self, controller: ViewController, fake_gateway: FakeGateway, pdf_bytes: bytes
    ) -> None:
        """The streaming slot is taken before any network call starts."""
        await ready(controller, pdf_bytes)

        placeholder_id = controller.begin_user_message("First")

        check.is_not_none(placeholder_id)
        check.is_none(controller.begin_user_message("Second"))
        check.is_false(controller.can_submit("Second"))
        check.equal(len(controller.conversation), 2)
        check.equal(fake_gateway.sent, [])

        check.is_true(await controller.stream_reply(placeholder_id))

        user, reply = controller.snapshot().messages
        check.equal(user.text, "First")
        check.equal(reply.id, placeholder_id)
        check.equal(reply.text, "The intuition is that...")
        check.equal(fake_gateway.sent, ["First"])

    async def test_stream_reply_needs_a_pending_exchange(
        self, controller: ViewController, fake_gateway: FakeGateway, pdf_bytes: bytes
    ) -> None:
        await ready(controller, pdf_bytes)
        placeholder_id = controller.begin_user_message("First")

        check.is_false(await controller.stream_reply("not-a-placeholder"))
        check.is_true(await controller.stream_reply(placeholder_id))
        check.is_false(await controller.stream_reply(placeholder_id))
        check.equal(fake_gateway.sent, ["First"])

    async def test_reset_drops_the_pending_exchange(
        self, controller: ViewController, fake_gateway: FakeGateway, pdf_bytes: bytes
    ) -> None:
        """A question claimed before reset is never sent."""
        await ready(controller, pdf_bytes)
        placeholder_id = controller.begin_user_message("First")

        controller.reset()

        check.is_false(await controller.stream_reply(placeholder_id))
        check.equal(fake_gateway.sent, [])
        check.equal(controller.snapshot().messages, [])
