"""NiceGUI chat interface consuming the relay's streamed responses."""

import uuid
from datetime import datetime

from nicegui import ui

from chat_relay.models.schemas import Message
from chat_relay.ui.client import stream_chat_response

CUSTOM_CSS = """
<style>
    body { background: #f5f5f5; min-height: 100vh; }

    .app-container {
        background: white;
        border-radius: 12px;
        box-shadow: 0 2px 8px rgba(0, 0, 0, 0.1);
        overflow: hidden;
    }

    .header { border-bottom: 1px solid #e5e7eb; }

    .message-user {
        background: #16a34a;
        color: white;
        border-radius: 18px 18px 4px 18px;
    }

    .message-assistant {
        background: #f3f4f6;
        color: #1f2937;
        border-radius: 18px 18px 18px 4px;
    }

    .message-assistant pre { margin: 0.5rem 0; overflow-x: auto; }
    .message-assistant code { font-family: 'Menlo', 'Monaco', monospace; }

    .typing-dot {
        width: 8px; height: 8px;
        background: #16a34a;
        border-radius: 50%;
        animation: bounce 1.4s infinite ease-in-out;
    }
    .typing-dot:nth-child(2) { animation-delay: 0.2s; }
    .typing-dot:nth-child(3) { animation-delay: 0.4s; }

    @keyframes bounce {
        0%, 60%, 100% { transform: translateY(0); }
        30% { transform: translateY(-6px); }
    }
</style>
"""


class ChatSession:
    """Transcript for one browser tab. Lives only as long as the page."""

    def __init__(self) -> None:
        self.messages: list[Message] = []
        self.times: dict[str, str] = {}
        self.is_streaming: bool = False

    def add_message(self, role: str, content: str) -> Message:
        message = Message(role=role, content=content, id=str(uuid.uuid4()))
        self.messages.append(message)
        self.times[message.id] = datetime.now().strftime("%I:%M %p")
        return message


@ui.page("/")
def chat_page() -> None:
    """Main chat page."""
    ui.add_head_html(CUSTOM_CSS)
    session = ChatSession()

    messages_container: ui.column
    input_field: ui.textarea
    send_btn: ui.button

    def render_message(msg: Message) -> None:
        is_user = msg.role == "user"
        align = "justify-end" if is_user else "justify-start"
        bubble = "message-user" if is_user else "message-assistant"

        with ui.row().classes(f"w-full {align}"):
            with ui.column().classes("max-w-[75%] gap-1"):
                with ui.element("div").classes(f"px-4 py-3 {bubble}"):
                    if is_user:
                        ui.label(msg.content).classes("text-sm whitespace-pre-wrap")
                    else:
                        ui.markdown(msg.content).classes("text-sm")
                ui.label(session.times.get(msg.id or "", "")).classes(
                    f"text-[10px] text-gray-400 {'self-end' if is_user else 'self-start'}"
                )

    def refresh_messages() -> None:
        messages_container.clear()
        with messages_container:
            if not session.messages:
                with ui.column().classes("w-full h-64 items-center justify-center gap-3"):
                    ui.icon("forum").classes("text-5xl text-gray-300")
                    ui.label("How can I help you today?").classes("text-lg text-gray-400")
            else:
                for msg in session.messages:
                    render_message(msg)

    async def send_message() -> None:
        text = input_field.value.strip()
        if not text or session.is_streaming:
            return

        input_field.value = ""
        session.is_streaming = True
        send_btn.disable()

        session.add_message("user", text)
        refresh_messages()

        with messages_container, ui.row().classes("w-full justify-start") as typing_row:
            with ui.element("div").classes("message-assistant px-4 py-3"), ui.row().classes("gap-1"):
                for _ in range(3):
                    ui.element("div").classes("typing-dot")

        accumulated = ""
        response_md: ui.markdown | None = None

        def on_chunk(content: str) -> None:
            nonlocal accumulated, response_md
            if response_md is None:
                typing_row.delete()
                with (
                    messages_container,
                    ui.row().classes("w-full justify-start"),
                    ui.element("div").classes("message-assistant px-4 py-3 max-w-[75%]"),
                ):
                    response_md = ui.markdown("").classes("text-sm")
            accumulated += content
            response_md.set_content(accumulated)

        def finish() -> None:
            session.is_streaming = False
            send_btn.enable()
            refresh_messages()

        def on_complete() -> None:
            session.add_message("assistant", accumulated)
            finish()

        def on_error(error: str) -> None:
            if response_md is None:
                typing_row.delete()
            elif accumulated:
                session.add_message("assistant", accumulated)
            finish()
            ui.notify(error, type="negative", multi_line=True)

        await stream_chat_response(session.messages, on_chunk, on_complete, on_error)

    def new_chat() -> None:
        session.messages.clear()
        session.times.clear()
        refresh_messages()

    with (
        ui.element("div").classes("w-full min-h-screen p-4 md:p-8"),
        ui.column().classes("w-full max-w-3xl mx-auto app-container").style(
            "height: calc(100vh - 4rem)"
        ),
    ):
        with ui.row().classes("w-full header px-5 py-4 items-center justify-between"):
            with ui.row().classes("items-center gap-3"):
                ui.icon("chat").classes("text-green-600 text-3xl")
                ui.label("AI Chat Assistant").classes("text-lg font-semibold")
            with ui.row().classes("items-center gap-3"):
                ui.label("Powered by OpenAI").classes("text-sm text-gray-500")
                ui.button(icon="add", on_click=new_chat).props("flat round")

        with (
            ui.scroll_area().classes("flex-grow w-full bg-gray-50"),
            ui.column().classes("w-full p-5"),
        ):
            messages_container = ui.column().classes("w-full gap-4")
            refresh_messages()

        with ui.row().classes("w-full p-4 gap-3 items-end bg-white border-t"):
            input_field = (
                ui.textarea(placeholder="Send a message...")
                .props("autogrow outlined dense rows=1")
                .classes("flex-grow")
                .on("keydown.enter.prevent", send_message)
            )
            send_btn = ui.button(icon="send", on_click=send_message).props(
                "round unelevated color=green"
            )


def main() -> None:
    ui.run(title="AI Chat Assistant", port=8080, reload=False)


if __name__ == "__main__":
    main()
