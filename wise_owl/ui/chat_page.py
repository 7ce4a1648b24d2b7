"""NiceGUI chat interface streaming answers turn by turn."""

import logging
import tempfile
import uuid
from pathlib import Path

from nicegui import events, ui

from wise_owl.client.config import ClientConfig, get_client_config
from wise_owl.client.files import FileStoreClient, FileStoreError
from wise_owl.client.identity import get_stable_user_id
from wise_owl.models import ChatMessage, SearchMode, StreamRequest
from wise_owl.streaming import EventBus, StreamingEngine, TurnCoordinator

logger = logging.getLogger(__name__)

CUSTOM_CSS = """
<style>
    body { background: #f5f5f5; min-height: 100vh; }

    .app-container {
        background: white;
        border-radius: 12px;
        box-shadow: 0 2px 8px rgba(0, 0, 0, 0.1);
        overflow: hidden;
    }

    .header { background: linear-gradient(135deg, #4b6cb7 0%, #182848 100%); }

    .message-user {
        background: #4b6cb7;
        color: white;
        border-radius: 18px 18px 4px 18px;
    }

    .message-bot {
        background: #f3f4f6;
        color: #1f2937;
        border-radius: 18px 18px 18px 4px;
    }
</style>
"""

MODE_LABELS = {
    SearchMode.STUDY_MATERIAL: "From PDF",
    SearchMode.WEB_SEARCH: "Web Results",
}


class ChatSession:
    """Manages chat state for a browser tab."""

    def __init__(self) -> None:
        self.messages: list[ChatMessage] = []
        self.search_mode: SearchMode = SearchMode.STUDY_MATERIAL
        self.selected_files: list[str] = []
        self.active_turn: TurnCoordinator | None = None

    @property
    def is_streaming(self) -> bool:
        return self.active_turn is not None

    def add_message(self, role: str, content: str) -> ChatMessage:
        message = ChatMessage(id=uuid.uuid4().hex, role=role, content=content)
        self.messages.append(message)
        return message

    def record_outcome(self, turn: TurnCoordinator) -> None:
        """Keep a stopped turn's partial answer and show its error once."""
        if turn.bot_message is None and turn.answer:
            self.add_message("bot", turn.answer)
        if turn.error:
            self.add_message("bot", f"Error: {turn.error}")

    def select_uploaded(self, names: list[str]) -> None:
        """Add freshly uploaded documents to the filter."""
        added = [name for name in names if name not in self.selected_files]
        self.selected_files = [*self.selected_files, *added]

    def forget_files(self, names: list[str]) -> None:
        self.selected_files = [n for n in self.selected_files if n not in names]

    def build_request(self, text: str, config: ClientConfig) -> StreamRequest:
        use_filter = self.search_mode is SearchMode.STUDY_MATERIAL and self.selected_files
        return StreamRequest(
            message=text,
            n_results=config.default_results,
            search_mode=self.search_mode,
            pdf_names=frozenset(self.selected_files) if use_filter else None,
        )


def _page_config() -> ClientConfig:
    config = get_client_config()
    if not config.user_id:
        config = config.model_copy(update={"user_id": get_stable_user_id()})
    return config


@ui.page("/")
async def chat_page() -> None:
    """Main chat page."""
    ui.add_head_html(CUSTOM_CSS)
    config = _page_config()
    bus = EventBus()
    engine = StreamingEngine(bus, config)
    file_store = FileStoreClient(config)
    session = ChatSession()

    messages_container: ui.column
    input_field: ui.textarea
    send_btn: ui.button
    stop_btn: ui.button

    def render_message(msg: ChatMessage) -> None:
        is_user = msg.role == "user"
        align = "justify-end" if is_user else "justify-start"
        bubble = "message-user" if is_user else "message-bot"
        with ui.row().classes(f"w-full {align}"):
            with ui.column().classes("max-w-[75%] gap-1"):
                with ui.element("div").classes(f"px-4 py-3 {bubble}"):
                    ui.markdown(msg.content).classes("text-sm")
                if msg.sources:
                    sources = ", ".join(source.title for source in msg.sources)
                    ui.label(f"Sources: {sources}").classes("text-[10px] text-gray-500")
                ui.label(msg.created_at.strftime("%I:%M %p")).classes(
                    "text-[10px] text-gray-400"
                )

    def refresh_messages() -> None:
        messages_container.clear()
        with messages_container:
            if not session.messages:
                with ui.column().classes("w-full h-64 items-center justify-center gap-3"):
                    ui.icon("school").classes("text-5xl text-gray-300")
                    ui.label("Ask a question about your study material").classes(
                        "text-lg text-gray-400"
                    )
            for msg in session.messages:
                render_message(msg)

    async def load_files() -> None:
        try:
            names = await file_store.list_files(config.user_id)
        except FileStoreError as e:
            logger.warning(f"Failed to fetch uploaded files: {e}")
            return
        file_select.set_options(names)

    async def handle_upload(e: events.UploadEventArguments) -> None:
        name = Path(e.file.name).name
        with tempfile.TemporaryDirectory() as tmp:
            path = Path(tmp) / name
            await e.file.save(path)
            try:
                await file_store.upload([path])
            except FileStoreError as err:
                ui.notify(str(err), type="negative")
                return
        ui.notify(f"Uploaded {name}", type="positive")
        await load_files()
        session.select_uploaded([name])

    async def delete_selected() -> None:
        names = list(session.selected_files)
        if not names:
            ui.notify("Select the documents to remove first")
            return
        for name in names:
            try:
                result = await file_store.delete(name)
            except FileStoreError as e:
                ui.notify(str(e), type="negative")
                continue
            session.forget_files([name])
            ui.notify(result.message)
        await load_files()

    async def delete_all() -> None:
        try:
            result = await file_store.delete_all()
        except FileStoreError as e:
            ui.notify(str(e), type="negative")
            return
        session.forget_files(list(session.selected_files))
        ui.notify(result.message)
        await load_files()

    async def send_message() -> None:
        text = (input_field.value or "").strip()
        if not text or session.is_streaming:
            return

        input_field.value = ""
        user_message = session.add_message("user", text)
        refresh_messages()

        with messages_container, ui.row().classes("w-full justify-start"):
            with ui.element("div").classes("px-4 py-3 message-bot max-w-[75%]"):
                answer_view = ui.markdown("_Thinking..._").classes("text-sm")

        turn = TurnCoordinator(
            engine,
            user_message.id,
            session.build_request(text, config),
            on_update=answer_view.set_content,
            on_answer=session.messages.append,
        )
        session.active_turn = turn
        send_btn.disable()
        stop_btn.enable()
        try:
            await turn.run()
        finally:
            turn.teardown()
            session.record_outcome(turn)
            session.active_turn = None
            send_btn.enable()
            stop_btn.disable()
            refresh_messages()

    def stop_generation() -> None:
        if session.active_turn is not None:
            session.active_turn.teardown()

    def new_chat() -> None:
        stop_generation()
        session.messages.clear()
        refresh_messages()

    async def close_page() -> None:
        stop_generation()
        await engine.aclose()
        await file_store.aclose()

    ui.context.client.on_disconnect(close_page)

    # === UI Layout ===
    with (
        ui.element("div").classes("w-full min-h-screen p-4 md:p-8"),
        ui.column().classes("w-full max-w-3xl mx-auto app-container").style(
            "height: calc(100vh - 4rem)"
        ),
    ):
        # Header
        with ui.row().classes("w-full header px-5 py-4 items-center justify-between"):
            with ui.row().classes("items-center gap-3"):
                ui.icon("school").classes("text-white text-3xl")
                ui.label("Wise Owl").classes("text-lg font-semibold text-white")
            ui.button(icon="add", on_click=new_chat).props("flat round color=white")

        # Search mode and document management
        with ui.row().classes("w-full px-5 pt-2 items-center"):
            ui.toggle(MODE_LABELS).bind_value(session, "search_mode")
        with ui.row().classes("w-full px-5 py-2 items-center gap-2").bind_visibility_from(
            session, "search_mode", lambda mode: mode is SearchMode.STUDY_MATERIAL
        ):
            file_select = (
                ui.select([], multiple=True, label="Documents")
                .props("use-chips dense")
                .classes("flex-grow")
                .bind_value(session, "selected_files")
            )
            ui.button(icon="delete", on_click=delete_selected).props("flat round").tooltip(
                "Remove selected documents"
            )
            ui.button(icon="delete_sweep", on_click=delete_all).props("flat round").tooltip(
                "Remove all documents"
            )
            ui.upload(
                label="Add PDF", on_upload=handle_upload, multiple=True, auto_upload=True
            ).props("accept=.pdf flat dense").classes("w-48")

        # Messages
        with (
            ui.scroll_area().classes("flex-grow w-full bg-gray-50"),
            ui.column().classes("w-full p-5"),
        ):
            messages_container = ui.column().classes("w-full gap-4")
            refresh_messages()

        # Input
        with ui.row().classes("w-full p-4 gap-3 items-end bg-white border-t"):
            input_field = (
                ui.textarea(placeholder="Ask a question...")
                .props("autogrow outlined dense rows=1")
                .classes("flex-grow")
                .on("keydown.enter.prevent", send_message)
            )
            stop_btn = ui.button(icon="stop", on_click=stop_generation).props("round flat")
            stop_btn.disable()
            send_btn = ui.button(icon="send", on_click=send_message).props("round unelevated")

    ui.timer(0.1, load_files, once=True)
