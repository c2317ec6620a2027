"""NiceGUI chat interface with a conversation sidebar and SSE streaming."""

import html
import os
from functools import partial

from nicegui import app, ui

from localchat.chat import (
    ERROR_MESSAGE,
    ChatSession,
    ConversationStore,
    KeyValueStorage,
    Message,
    get_client_config,
)
from localchat.ui.formatting import markdown_to_html, split_code_blocks

CUSTOM_CSS = """
<link href="https://fonts.googleapis.com/css2?family=Inter:wght@400;500;600&display=swap"
      rel="stylesheet">
<style>
    * { font-family: 'Inter', sans-serif; }

    body { background: #f3f4f6; }

    .sidebar { background: #1f2937; color: white; }
    .sidebar-item { border-radius: 6px; cursor: pointer; }
    .sidebar-item:hover { background: #374151; }
    .sidebar-item.active { background: #374151; }

    .message-user {
        background: #dbeafe;
        color: #1e3a8a;
        border-radius: 12px 12px 4px 12px;
    }

    .message-assistant {
        background: #f3f4f6;
        color: #111827;
        border-radius: 12px 12px 12px 4px;
    }

    .typing-dot {
        width: 8px; height: 8px;
        background: #2563eb;
        border-radius: 50%;
        animation: bounce 1.4s infinite ease-in-out;
    }
    .typing-dot:nth-child(2) { animation-delay: 0.2s; }
    .typing-dot:nth-child(3) { animation-delay: 0.4s; }

    @keyframes bounce {
        0%, 60%, 100% { transform: translateY(0); }
        30% { transform: translateY(-6px); }
    }

    .input-box {
        background: white;
        border: 2px solid #d1d5db;
        border-radius: 8px;
        transition: border-color 0.2s;
    }
    .input-box:focus-within { border-color: #2563eb; }

    .message-assistant strong { font-weight: 600; }
    .message-assistant em { font-style: italic; }
    .message-assistant code { font-family: 'Menlo', 'Monaco', monospace; }
    .message-assistant ul, .message-assistant ol { margin: 0.5rem 0; }
</style>
"""


@ui.page("/")
def chat_page() -> None:
    """Main chat page."""
    ui.add_head_html(CUSTOM_CSS)
    config = get_client_config()
    store = ConversationStore(KeyValueStorage(app.storage.user, config.storage_key))

    sidebar_container: ui.column
    messages_container: ui.column
    scroll_area: ui.scroll_area
    input_field: ui.textarea
    send_btn: ui.button

    def render_typing_dots() -> None:
        with ui.row().classes("gap-1 py-1"):
            for _ in range(3):
                ui.element("div").classes("typing-dot")

    def render_content(msg: Message) -> None:
        if msg.role == "user":
            escaped = html.escape(msg.content).replace("\n", "<br>")
            ui.html(escaped, sanitize=False).classes("text-sm leading-relaxed")
            return

        if msg.is_streaming and not msg.content:
            render_typing_dots()
            return

        for segment in split_code_blocks(msg.content):
            if segment.kind == "code":
                ui.code(segment.content, language=segment.language).classes("w-full my-2 text-xs")
            else:
                ui.html(markdown_to_html(segment.content), sanitize=False).classes(
                    "text-sm leading-relaxed"
                )

    def render_message(msg: Message) -> None:
        is_user = msg.role == "user"
        align = "justify-end" if is_user else "justify-start"
        bubble = "message-user" if is_user else "message-assistant"

        with (
            ui.row().classes(f"w-full {align}"),
            ui.column().classes(f"max-w-[75%] gap-1 px-4 py-3 {bubble}"),
        ):
            with ui.row().classes("items-center gap-2"):
                ui.label("You" if is_user else "AI").classes("font-bold text-sm")
                if msg.is_streaming:
                    ui.label("...").classes("animate-pulse")
            render_content(msg)
            ui.label(msg.timestamp.astimezone().strftime("%I:%M %p")).classes(
                "text-[10px] text-gray-500"
            )

    def refresh_messages() -> None:
        messages_container.clear()
        conversation = store.active
        with messages_container:
            if conversation is None or not conversation.messages:
                with ui.column().classes("w-full h-64 items-center justify-center gap-3"):
                    ui.icon("forum").classes("text-5xl text-gray-300")
                    ui.label("Start a conversation").classes("text-lg text-gray-400")
            else:
                for msg in conversation.messages:
                    render_message(msg)
        scroll_area.scroll_to(percent=1.0)

    def refresh_sidebar() -> None:
        sidebar_container.clear()
        with sidebar_container:
            for conversation in store.conversations():
                active = "active" if conversation.id == store.active_id else ""
                with (
                    ui.row()
                    .classes(f"sidebar-item {active} w-full p-2 items-center no-wrap")
                    .on("click", partial(select_chat, conversation.id))
                ):
                    ui.label(conversation.title).classes("truncate flex-1 text-sm")
                    (
                        ui.button(icon="close")
                        .props("flat round dense size=sm color=grey-5")
                        .on("click.stop", partial(delete_chat, conversation.id))
                    )

    def refresh() -> None:
        refresh_sidebar()
        refresh_messages()

    session = ChatSession(store, config, on_change=refresh)

    def select_chat(conversation_id: str) -> None:
        store.select(conversation_id)
        refresh()

    def new_chat() -> None:
        store.create_conversation()
        refresh()

    def delete_chat(conversation_id: str) -> None:
        if store.get(conversation_id).streaming_message is not None:
            ui.notify("Wait for the reply to finish before deleting this chat")
            return
        store.delete_conversation(conversation_id)
        refresh()

    async def send_message() -> None:
        text = input_field.value or ""
        if not text.strip() or session.is_loading:
            return

        input_field.value = ""
        send_btn.disable()
        input_field.disable()
        try:
            reply = await session.submit(text)
        finally:
            send_btn.enable()
            input_field.enable()

        if reply is not None and reply.content == ERROR_MESSAGE:
            ui.notify("The model server could not be reached", type="negative")

    # === UI Layout ===
    with ui.row().classes("w-full h-screen no-wrap gap-0"):
        # Sidebar
        with ui.column().classes("sidebar w-64 h-full p-4 gap-3"):
            ui.button("New Chat", icon="add", on_click=new_chat).classes("w-full").props(
                "unelevated color=primary"
            )
            with ui.scroll_area().classes("flex-grow w-full"):
                sidebar_container = ui.column().classes("w-full gap-1")

        # Main chat area
        with ui.column().classes("flex-1 h-full gap-0"):
            with (
                ui.scroll_area().classes("flex-grow w-full bg-white") as scroll_area,
                ui.column().classes("w-full p-4"),
            ):
                messages_container = ui.column().classes("w-full gap-4")

            with ui.row().classes("w-full p-4 gap-3 items-end bg-white border-t no-wrap"):
                with ui.element("div").classes("flex-grow input-box px-3 py-2"):
                    input_field = (
                        ui.textarea(placeholder="Type your message...")
                        .props("autogrow borderless dense rows=1")
                        .classes("w-full")
                        .on("keydown.enter.prevent", send_message)
                    )
                send_btn = ui.button("Send", on_click=send_message).props(
                    "unelevated color=primary"
                )

    refresh()


def main() -> None:
    ui.run(
        title="Local LLM Chat",
        port=8080,
        reload=False,
        storage_secret=os.getenv("NICEGUI_STORAGE_SECRET", "local-llm-chat-secret"),
    )


if __name__ == "__main__":
    main()
