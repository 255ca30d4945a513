"""NiceGUI chat widget rendered from the chat core's state."""

import logging

from nicegui import Client, ui

from src.chat.actions import ActionRegistry
from src.chat.config import get_chat_config
from src.chat.session import ChatSession
from src.chat.shell import ChatShell, ShellPhase
from src.chat.transport import SocketIOChannel
from src.models.schemas import ConnectionState, Message, QuickOption, Sender
from src.ui.formatting import format_time, markdown_to_html, option_prefix

logger = logging.getLogger(__name__)

CUSTOM_CSS = """
<link href="https://fonts.googleapis.com/css2?family=Inter:wght@400;500;600&display=swap"
      rel="stylesheet">
<style>
    * { font-family: 'Inter', sans-serif; }

    .chat-interface {
        position: fixed; right: 24px; bottom: 24px;
        width: 380px; height: 600px;
        background: white;
        border-radius: 12px;
        box-shadow: 0 8px 24px rgba(0, 0, 0, 0.15);
        overflow: hidden;
        z-index: 1000;
    }
    .chat-interface.expanded { width: min(900px, 90vw); height: 90vh; }

    .chat-minimized {
        position: fixed; right: 24px; bottom: 24px;
        background: #da291c; color: white;
        border-radius: 24px;
        cursor: pointer;
        z-index: 1000;
    }

    .header { background: linear-gradient(135deg, #da291c 0%, #a51d13 100%); }

    .message-user {
        background: #da291c;
        color: white;
        border-radius: 18px 18px 4px 18px;
    }
    .message-bot {
        background: #f3f4f6;
        color: #1f2937;
        border-radius: 18px 18px 18px 4px;
    }

    .status-dot { width: 8px; height: 8px; border-radius: 50%; }
    .status-online { background: #22c55e; }
    .status-offline { background: #9ca3af; }

    .input-box {
        background: #f9fafb;
        border: 1px solid #e5e7eb;
        border-radius: 12px;
    }
    .input-box:focus-within { border-color: #da291c; }

    .send-btn { background: #da291c !important; }
</style>
"""

_STATUS_TEXT = {
    ConnectionState.CONNECTED: "Online",
    ConnectionState.CONNECTING: "Connecting...",
    ConnectionState.DISCONNECTED: "Offline",
    ConnectionState.ERRORED: "Offline",
}


class NiceGUINavigator:
    """Navigator that opens URLs in the browser of one NiceGUI client."""

    def __init__(self, client: Client) -> None:
        self._client = client

    def open_external(self, url: str, new_tab: bool = True) -> None:
        logger.info(f"Opening {url}")
        with self._client:
            ui.navigate.to(url, new_tab=new_tab)


def bind_shell_to_client(client: Client, shell: ChatShell) -> None:
    """Tear the chat down when the page is deleted.

    A browser reconnect keeps the same client, so the session survives it.
    """
    client.on_delete(shell.close)


@ui.page("/")
async def chat_page(client: Client) -> None:
    """Launcher button plus the floating chat widget."""
    ui.add_head_html(CUSTOM_CSS)
    config = get_chat_config()
    navigator = NiceGUINavigator(client)
    draft = {"text": ""}

    def create_session() -> ChatSession:
        session = ChatSession(SocketIOChannel(config), config)
        session.subscribe(chat_surface.refresh)
        return session

    shell = ChatShell(
        create_session,
        ActionRegistry(navigator, config.promo_url),
        navigator,
    )

    async def start_chat() -> None:
        await shell.start()
        chat_surface.refresh()

    async def close_chat() -> None:
        draft["text"] = ""
        await shell.close()
        chat_surface.refresh()

    def toggle_minimize() -> None:
        shell.toggle_minimize()
        chat_surface.refresh()

    def toggle_expand() -> None:
        shell.toggle_expand()
        chat_surface.refresh()

    async def reconnect() -> None:
        if shell.session is not None:
            await shell.session.open()

    async def send_message() -> None:
        if shell.dispatcher is None:
            return
        if await shell.dispatcher.submit_free_text(draft["text"]):
            draft["text"] = ""
            chat_surface.refresh()

    async def select_option(option: QuickOption) -> None:
        if shell.dispatcher is not None:
            await shell.dispatcher.select_option(option)

    def open_aux_link(message: Message) -> None:
        if shell.dispatcher is not None:
            shell.dispatcher.open_aux_link(message)

    def render_message(message: Message) -> None:
        is_user = message.sender is Sender.USER
        align = "justify-end" if is_user else "justify-start"
        bubble = "message-user" if is_user else "message-bot"

        with ui.row().classes(f"w-full {align}"):
            with ui.column().classes("max-w-[80%] gap-1"):
                with ui.element("div").classes(f"px-4 py-3 {bubble}"):
                    ui.html(markdown_to_html(message.body), sanitize=False).classes(
                        "text-sm leading-relaxed"
                    )
                ui.label(format_time(message.sent_at)).classes(
                    f"text-[10px] text-gray-400 {'self-end' if is_user else 'self-start'}"
                )
                if message.options:
                    with ui.column().classes("gap-2"):
                        for option in message.options:
                            tooltip = {
                                "link": "Mở liên kết",
                                "action": "Thực hiện hành động",
                            }.get(option.kind, "Chọn tùy chọn này")
                            ui.button(
                                option_prefix(option) + option.label,
                                on_click=lambda o=option: select_option(o),
                            ).props("outline no-caps color=red-8").classes(
                                "text-left text-xs"
                            ).tooltip(tooltip)
                if message.aux_link:
                    ui.button(
                        "🔗 Mở liên kết",
                        on_click=lambda m=message: open_aux_link(m),
                    ).props("flat dense no-caps color=red-8").classes("text-xs")

    def render_minimized() -> None:
        with ui.row().classes("chat-minimized px-4 py-2 items-center gap-3").on(
            "click", toggle_minimize
        ):
            ui.label("💬 Lotte Finance Chat").classes("text-sm font-medium")
            ui.button(icon="close").props("flat round dense color=white size=sm").on(
                "click.stop", close_chat
            )

    def render_open(session: ChatSession) -> None:
        layout = "chat-interface expanded" if shell.effective_expanded else "chat-interface"
        online = session.is_connected

        with ui.column().classes(f"{layout} gap-0"):
            # Header
            with ui.row().classes("w-full header px-4 py-3 items-center justify-between"):
                with ui.row().classes("items-center gap-3"):
                    ui.label("🏦").classes("text-2xl")
                    with ui.column().classes("gap-0"):
                        ui.label(config.assistant_name).classes(
                            "text-base font-semibold text-white"
                        )
                        with ui.row().classes("items-center gap-1"):
                            dot = "status-online" if online else "status-offline"
                            ui.element("div").classes(f"status-dot {dot}")
                            ui.label(_STATUS_TEXT[session.state]).classes(
                                "text-xs text-white/80"
                            )
                with ui.row().classes("items-center gap-1"):
                    if session.state in (ConnectionState.ERRORED, ConnectionState.DISCONNECTED):
                        ui.button(icon="refresh", on_click=reconnect).props(
                            "flat round dense color=white"
                        ).tooltip("Reconnect")
                    ui.button(
                        icon="close_fullscreen" if shell.expanded else "open_in_full",
                        on_click=toggle_expand,
                    ).props("flat round dense color=white").tooltip(
                        "Minimize" if shell.expanded else "Expand"
                    )
                    ui.button(icon="remove", on_click=toggle_minimize).props(
                        "flat round dense color=white"
                    ).tooltip("Minimize")
                    ui.button(icon="close", on_click=close_chat).props(
                        "flat round dense color=white"
                    ).tooltip("Close")

            # Messages
            with ui.scroll_area().classes("flex-grow w-full bg-gray-50") as scroll:
                with ui.column().classes("w-full p-4 gap-4"):
                    for message in session.transcript:
                        render_message(message)
            scroll.scroll_to(percent=1.0)

            # Input
            with ui.column().classes("w-full p-3 gap-1 bg-white border-t"):
                with ui.row().classes("w-full gap-2 items-end no-wrap"):
                    with ui.element("div").classes("flex-grow input-box px-3 py-1"):
                        # Enter submits, Shift+Enter inserts a newline
                        input_field = (
                            ui.textarea(placeholder="Type your message here...")
                            .props("autogrow borderless dense rows=1")
                            .classes("w-full")
                            .bind_value(draft, "text")
                            .on("keydown.enter.exact.prevent", send_message)
                        )
                        input_field.set_enabled(online)
                    send_btn = (
                        ui.button(icon="send", on_click=send_message)
                        .props("round unelevated color=white")
                        .classes("send-btn")
                    )
                    send_btn.set_enabled(online)
                ui.label(
                    "This chat is secured and your information is protected."
                ).classes("text-[10px] text-gray-400")

    @ui.refreshable
    def chat_surface() -> None:
        session = shell.session
        if shell.phase is ShellPhase.CLOSED or session is None:
            return
        if shell.phase is ShellPhase.OPEN_MINIMIZED:
            render_minimized()
        else:
            render_open(session)

    with ui.column().classes("w-full min-h-screen items-center justify-center gap-4"):
        ui.label("LOTTE Finance").classes("text-3xl font-semibold text-red-700")
        ui.button("Chat with us", icon="chat", on_click=start_chat).props(
            "unelevated color=red-8 size=lg"
        )

    chat_surface()
    bind_shell_to_client(client, shell)


def main() -> None:
    ui.run(title="Lotte Finance Assistant", port=8080, reload=False)


if __name__ == "__main__":
    main()
