"""NiceGUI dashboard: upload, structured analysis and tutor discussion."""

from collections.abc import Callable

from nicegui import events, ui

from quantscholar.api.papers import MAX_UPLOAD_SIZE
from quantscholar.gateway.gemini import get_gateway
from quantscholar.models.analysis import AnalysisResult
from quantscholar.models.conversation import ConversationMessage, MessageRole
from quantscholar.models.schemas import SessionSnapshot, ViewState
from quantscholar.session.controller import ViewController
from quantscholar.ui.formatting import markdown_to_html

WELCOME_TEXT = (
    "I've analyzed the paper. Ask me about specific equations, the identification "
    "strategy, or why the authors made certain modeling choices."
)

CUSTOM_CSS = """
<link href="https://fonts.googleapis.com/css2?family=Inter:wght@400;500;600&family=Merriweather:wght@400;700&display=swap"
      rel="stylesheet">
<style>
    * { font-family: 'Inter', sans-serif; }
    .font-serif, .font-serif * { font-family: 'Merriweather', serif; }

    body { background: #f8fafc; min-height: 100vh; }

    .navbar { background: white; border-bottom: 1px solid #e2e8f0; }

    .card { background: white; border-radius: 10px; border: 1px solid #e5e7eb; }
    .card-accent { border-left: 4px solid #334155; }
    .card-critique { background: #fef2f2; border: 1px solid #fecaca; }

    .message-user {
        background: #475569;
        color: white;
        border-radius: 18px 18px 4px 18px;
    }

    .message-assistant {
        background: white;
        color: #1f2937;
        border: 1px solid #e5e7eb;
        border-radius: 18px 18px 18px 4px;
    }

    .message-error { background: #fef2f2; color: #991b1b; border-color: #fecaca; }

    .typing-dot {
        width: 8px; height: 8px;
        background: #94a3b8;
        border-radius: 50%;
        animation: bounce 1.4s infinite ease-in-out;
    }
    .typing-dot:nth-child(2) { animation-delay: 0.15s; }
    .typing-dot:nth-child(3) { animation-delay: 0.3s; }

    @keyframes bounce {
        0%, 60%, 100% { transform: translateY(0); }
        30% { transform: translateY(-6px); }
    }

    .math-inline { font-family: 'Merriweather', serif; font-style: italic;
                   background: #f3f4f6; padding: 0 4px; border-radius: 4px; }
    .math-block { font-family: 'Merriweather', serif; font-style: italic;
                  background: #f3f4f6; padding: 8px; border-radius: 6px; margin: 6px 0; }
</style>
"""


def render_list(items: list[str], empty: str = "None reported") -> None:
    if not items:
        ui.label(empty).classes("text-sm text-gray-400 italic")
        return
    with ui.column().classes("gap-1"):
        for item in items:
            with ui.row().classes("items-start gap-2 no-wrap"):
                ui.label("•").classes("text-slate-500")
                ui.label(item).classes("text-sm text-gray-700")


def section_heading(text: str) -> None:
    ui.label(text).classes("text-sm font-bold text-gray-800 uppercase tracking-wide border-b pb-2 w-full")


def render_analysis(analysis: AnalysisResult) -> None:
    """Read-only analysis panel."""
    with ui.column().classes("w-full p-6 gap-6"):
        with ui.column().classes("card card-accent p-6 w-full gap-2"):
            ui.label(analysis.title).classes("text-2xl font-bold text-gray-900 font-serif leading-tight")
            if analysis.authors:
                ui.label(", ".join(analysis.authors)).classes("text-sm text-slate-600 font-medium")
            if analysis.journal_fit:
                ui.label(f"Target: {analysis.journal_fit}").classes(
                    "text-xs px-3 py-1 rounded-full bg-slate-100 text-slate-800 font-semibold uppercase"
                )

        with ui.column().classes("card p-6 w-full gap-2"):
            section_heading("Research Question")
            ui.label(analysis.research_question).classes("text-gray-700 font-serif")

        with ui.column().classes("card p-6 w-full gap-2"):
            with ui.row().classes("items-center gap-2"):
                ui.icon("psychology").classes("text-slate-700")
                section_heading('Theoretical Contribution (The "Taste")')
            ui.label(analysis.theoretical_contribution).classes("text-gray-700 leading-relaxed font-serif")

        methodology = analysis.methodology
        with ui.column().classes("card p-6 w-full gap-3"):
            section_heading("Model Setup & Mechanics")
            ui.label("Framework").classes("text-xs font-semibold text-gray-400 uppercase")
            ui.label(methodology.type or "Not stated").classes("text-gray-800 font-medium")
            ui.label("Key Assumptions").classes("text-xs font-semibold text-gray-400 uppercase")
            render_list(methodology.key_assumptions)
            ui.label("The Game").classes("text-xs font-semibold text-gray-400 uppercase")
            ui.label(methodology.model_setup or "Not stated").classes("text-sm text-gray-600")

        with ui.column().classes("card p-6 w-full gap-2"):
            section_heading("Key Findings & Propositions")
            render_list(analysis.key_findings)

        critique = analysis.critique
        with ui.column().classes("card card-critique p-6 w-full gap-3"):
            ui.label("Reviewer 2's Perspective").classes("font-bold text-red-900")
            if critique.reviewer_perspective:
                ui.label(f'"{critique.reviewer_perspective}"').classes("text-sm italic text-red-800")
            with ui.row().classes("w-full gap-6 no-wrap"):
                with ui.column().classes("flex-1"):
                    ui.label("Weaknesses").classes("text-xs font-bold text-red-700 uppercase")
                    render_list(critique.weaknesses)
                with ui.column().classes("flex-1"):
                    ui.label("Strengths").classes("text-xs font-bold text-slate-700 uppercase")
                    render_list(critique.strengths)

        if analysis.managerial_implications:
            with ui.column().classes("card p-6 w-full gap-2"):
                section_heading("Managerial Implications")
                ui.label(analysis.managerial_implications).classes("text-sm text-gray-700")


def render_message(msg: ConversationMessage) -> None:
    is_user = msg.role is MessageRole.USER
    align = "justify-end" if is_user else "justify-start"
    bubble = "message-user" if is_user else "message-assistant"
    if msg.is_error:
        bubble += " message-error"

    with ui.row().classes(f"w-full {align}"):
        with ui.column().classes("max-w-[85%] gap-1"):
            with ui.element("div").classes(f"px-4 py-3 {bubble}"):
                if msg.is_streaming and not msg.text:
                    with ui.row().classes("gap-1 items-center h-5"):
                        for _ in range(3):
                            ui.element("div").classes("typing-dot")
                elif is_user:
                    ui.label(msg.text).classes("text-sm leading-relaxed whitespace-pre-wrap")
                else:
                    ui.html(markdown_to_html(msg.text), sanitize=False).classes("text-sm leading-relaxed")
            ui.label(msg.timestamp.strftime("%I:%M %p")).classes(
                f"text-[10px] text-gray-400 {'self-end' if is_user else 'self-start'}"
            )


@ui.page("/")
def paper_page() -> None:
    """Main page: one ViewController per browser client."""
    ui.add_head_html(CUSTOM_CSS)

    try:
        controller = ViewController(get_gateway())
    except ValueError as e:
        with ui.column().classes("w-full h-screen items-center justify-center"):
            ui.icon("key_off").classes("text-5xl text-gray-300")
            ui.label("AI gateway is not configured").classes("text-lg text-gray-500")
            ui.label(str(e)).classes("text-xs text-gray-400")
        return

    rendered: dict[str, ViewState | None] = {"state": None}
    send_controls: dict[str, Callable[[bool], None]] = {}

    async def handle_upload(e: events.UploadEventArguments) -> None:
        await controller.select_file(e.file)
        notice = controller.notice
        if notice:
            ui.notify(notice, type="negative")
            controller.dismiss_notice()

    async def send_message(input_field: ui.textarea) -> None:
        text = input_field.value or ""
        if not controller.can_submit(text):
            return
        input_field.value = ""
        await controller.submit_user_message(text)

    @ui.refreshable
    def messages_view(messages: list[ConversationMessage]) -> None:
        if not messages:
            render_message(ConversationMessage(role=MessageRole.ASSISTANT, text=WELCOME_TEXT))
        for msg in messages:
            render_message(msg)

    def render_upload(analyzing: bool) -> None:
        with ui.column().classes("w-full max-w-xl mx-auto mt-20 items-center gap-6"):
            ui.label("QuantScholar").classes("text-4xl font-bold text-slate-900 font-serif")
            ui.label("Upload your literature (PDF). Build your academic intuition.").classes(
                "text-lg text-slate-600"
            )
            if analyzing:
                with ui.column().classes("card p-10 w-full items-center gap-2"):
                    ui.spinner(size="xl").classes("text-slate-400")
                    ui.label("Deconstructing Paper...").classes("text-slate-600 font-medium")
                    ui.label("Analyzing model mechanics").classes("text-sm text-slate-400")
            else:
                ui.upload(
                    label="Drop your PDF here, or click to browse",
                    on_upload=handle_upload,
                    on_rejected=lambda: ui.notify("Only PDF files within the size limit are supported"),
                    auto_upload=True,
                    max_files=1,
                    max_file_size=MAX_UPLOAD_SIZE,
                ).props('accept=".pdf,application/pdf" flat bordered').classes("w-full")
            with ui.row().classes("w-full justify-around text-sm text-slate-500"):
                for icon, caption in (
                    ("description", "Structure Extraction"),
                    ("functions", "Model Breakdown"),
                    ("help_outline", "Deep Q&A"),
                ):
                    with ui.column().classes("items-center gap-1"):
                        ui.icon(icon).classes("text-2xl text-slate-400")
                        ui.label(caption)

    def render_dashboard(snapshot: SessionSnapshot) -> None:
        with ui.splitter(value=55).classes("w-full").style("height: calc(100vh - 4rem)") as splitter:
            with splitter.before:
                with ui.scroll_area().classes("w-full h-full bg-slate-50"):
                    if snapshot.analysis is not None:
                        render_analysis(snapshot.analysis)
            with splitter.after:
                with ui.column().classes("w-full h-full gap-0 bg-white"):
                    with ui.column().classes("w-full p-4 border-b gap-0"):
                        with ui.row().classes("items-center gap-2"):
                            ui.icon("forum").classes("text-slate-600")
                            ui.label("Deep Dive").classes("text-lg font-bold text-slate-900")
                        ui.label("Discuss propositions and math with the AI Tutor.").classes(
                            "text-xs text-gray-500"
                        )
                    with ui.scroll_area().classes("flex-grow w-full bg-gray-50"):
                        with ui.column().classes("w-full p-4 gap-4"):
                            messages_view(snapshot.messages)
                    with ui.column().classes("w-full p-4 border-t gap-1"):
                        with ui.row().classes("w-full items-end gap-3 no-wrap"):
                            input_field = (
                                ui.textarea(placeholder="Ask about the model mechanics...")
                                .props("autogrow outlined dense rows=1")
                                .classes("flex-grow")
                            )
                            send_btn = ui.button(
                                icon="send", on_click=lambda: send_message(input_field)
                            ).props("round unelevated color=blue-grey-8")
                            input_field.on("keydown.enter.prevent", lambda: send_message(input_field))
                        ui.label("Gemini can hallucinate citations. Verify details.").classes(
                            "text-xs text-gray-400 self-center"
                        )

        def set_enabled(enabled: bool) -> None:
            send_btn.set_enabled(enabled)
            input_field.set_enabled(enabled)

        send_controls["set_enabled"] = set_enabled
        set_enabled(not snapshot.is_streaming)

    @ui.refreshable
    def body(snapshot: SessionSnapshot) -> None:
        with ui.row().classes("navbar w-full h-16 px-6 items-center justify-between"):
            with ui.row().classes("items-center gap-2 cursor-pointer").on("click", controller.reset):
                ui.icon("psychology").classes("text-2xl text-slate-800")
                ui.label("QuantScholar").classes("text-xl font-bold text-slate-900 font-serif")
            if snapshot.state is ViewState.READY:
                with ui.row().classes("items-center gap-4"):
                    ui.label(snapshot.file_name or "").classes(
                        "text-sm text-gray-500 bg-gray-100 px-3 py-1 rounded-full truncate max-w-[200px]"
                    )
                    ui.button("Upload New", on_click=controller.reset).props("flat color=blue-grey-8")

        if snapshot.state is ViewState.READY:
            render_dashboard(snapshot)
        else:
            send_controls.clear()
            render_upload(analyzing=snapshot.state is ViewState.ANALYZING)

    def on_change(snapshot: SessionSnapshot) -> None:
        if snapshot.state is not rendered["state"]:
            rendered["state"] = snapshot.state
            body.refresh(snapshot)
            return
        if snapshot.state is ViewState.READY:
            messages_view.refresh(snapshot.messages)
            if set_enabled := send_controls.get("set_enabled"):
                set_enabled(not snapshot.is_streaming)

    initial = controller.snapshot()
    rendered["state"] = initial.state
    body(initial)

    controller.subscribe(on_change)
