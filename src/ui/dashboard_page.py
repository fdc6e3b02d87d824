"""NiceGUI dashboard page for predictions, recommendations and chat."""

from urllib.parse import quote

from nicegui import ui

from src.client.api_client import get_api_client
from src.models.catalog import (
    CATEGORICAL_OPTIONS,
    MODELS,
    feature_label,
    format_probability,
    is_categorical,
    parse_numeric,
)
from src.models.schemas import RecommendationItem, Role
from src.ui.state import (
    SECTION_CHAT,
    SECTION_INPUTS,
    SECTION_RESULTS,
    SECTION_STATUS,
    DashboardState,
    PredictPhase,
)

CUSTOM_CSS = """
<style>
    body { background: #f5f5f5; }

    .panel {
        background: white;
        border: 1px solid #e5e7eb;
        border-radius: 12px;
    }

    .model-card { border: 1px solid #e5e7eb; border-radius: 8px; cursor: pointer; }
    .model-card.active { border-color: #667eea; background: #eef2ff; }

    .message-user {
        background: linear-gradient(135deg, #667eea 0%, #764ba2 100%);
        color: white;
        border-radius: 18px 18px 4px 18px;
    }

    .message-assistant {
        background: #f3f4f6;
        color: #1f2937;
        border-radius: 18px 18px 18px 4px;
    }

    .typing-dot {
        width: 8px; height: 8px;
        background: #667eea;
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

CHAT_PLACEHOLDER = (
    "Ask AI assistant about predictions, recommendations, or mining operations..."
)


def _select_options(value: str) -> dict[str, str]:
    options = {"": "Select..."}
    options.update({option: option for option in CATEGORICAL_OPTIONS})
    # Keep sample values the fixed option list does not know about selectable
    if value and value not in options:
        options[value] = value
    return options


def render_recommendation_items(items: list[RecommendationItem]) -> None:
    if not items:
        ui.label("No recommendations.").classes("text-sm text-gray-400")
        return
    for number, item in enumerate(items, start=1):
        with ui.column().classes("w-full gap-1 py-2"):
            with ui.row().classes("items-center gap-2"):
                ui.badge(str(number)).props("rounded color=indigo")
                ui.label(item.action).classes("font-semibold")
            ui.label(item.justification).classes("text-sm text-gray-600")
            ui.label(f"Expected Impact: {item.expected_impact}").classes("text-sm")


def render_typing_indicator() -> None:
    with ui.row().classes("gap-1 py-1"):
        for _ in range(3):
            ui.element("div").classes("typing-dot")


@ui.page("/")
def dashboard_page() -> None:
    """Main dashboard page."""
    ui.add_head_html(CUSTOM_CSS)

    chat_input: ui.input
    send_btn: ui.button
    stop_btn: ui.button
    chat_scroll: ui.scroll_area

    def notify(message: str, kind: str) -> None:
        ui.notify(message, type=kind)

    def on_change(section: str) -> None:
        if section == SECTION_INPUTS:
            model_cards.refresh()
            input_form.refresh()
        elif section == SECTION_STATUS:
            action_buttons.refresh()
        elif section == SECTION_RESULTS:
            results.refresh()
        elif section == SECTION_CHAT:
            chat_messages.refresh()
            streaming = state.chat.is_streaming
            chat_input.set_enabled(not streaming)
            send_btn.set_enabled(not streaming)
            stop_btn.set_visibility(streaming)
            chat_scroll.scroll_to(percent=1.0)

    state = DashboardState(get_api_client(), notify=notify, on_change=on_change)

    @ui.refreshable
    def model_cards() -> None:
        with ui.grid(columns=2).classes("w-full gap-3"):
            for model in MODELS:
                active = "active" if model.name == state.selected_model else ""
                with (
                    ui.card()
                    .classes(f"model-card {active} p-4 gap-1")
                    .on("click", lambda name=model.name: state.select_model(name))
                ):
                    ui.label(model.display_name).classes("font-semibold")
                    ui.label(model.description).classes("text-xs text-gray-500")

    @ui.refreshable
    def input_form() -> None:
        model = state.current_model
        with ui.row().classes("w-full items-center justify-between"):
            ui.label(f"Input Parameters for {model.display_name}").classes(
                "text-lg font-semibold"
            )
            ui.button("Use Test Data", on_click=state.use_test_data).props("outline")

        with ui.grid(columns=2).classes("w-full gap-3"):
            for feature in model.features:
                value = state.input_values.get(feature, "")
                if is_categorical(feature):
                    selected = value if isinstance(value, str) else str(value)
                    ui.select(
                        _select_options(selected),
                        value=selected,
                        label=feature_label(feature),
                        on_change=lambda e, f=feature: state.set_input(f, e.value),
                    ).classes("w-full")
                else:
                    ui.number(
                        label=feature_label(feature),
                        value=None if value == "" else parse_numeric(value),
                        step=0.1,
                        placeholder=f"Enter {feature}",
                        on_change=lambda e, f=feature: state.set_input(f, parse_numeric(e.value)),
                    ).classes("w-full")

    @ui.refreshable
    def action_buttons() -> None:
        predicting = state.phase is PredictPhase.PREDICTING
        with ui.row().classes("gap-3"):
            predict_btn = ui.button(
                "Predicting..." if predicting else "Run Prediction",
                on_click=state.predict,
            ).props("unelevated color=indigo")
            if predicting:
                predict_btn.props("loading")
            test_btn = ui.button("Test All Models", on_click=state.test_all_models).props(
                "outline"
            )
            if state.is_busy:
                predict_btn.disable()
                test_btn.disable()

    @ui.refreshable
    def results() -> None:
        prediction = state.prediction_result
        if prediction is None:
            return

        with ui.column().classes("panel w-full p-6 gap-3"):
            ui.label("Prediction Results").classes("text-xl font-semibold")
            with ui.row().classes("w-full justify-between items-center"):
                ui.label(f"{prediction.model.upper()} Model").classes("font-semibold")
                ui.label(prediction.timestamp).classes("text-xs text-gray-400")
            ui.label(f"Prediction: {prediction.prediction}").classes("text-lg")

            if prediction.probabilities:
                ui.label("Confidence Scores:").classes("font-medium")
                for label, score in prediction.probabilities.items():
                    with ui.row().classes("w-full items-center gap-3 no-wrap"):
                        ui.label(f"{label}:").classes("w-32")
                        ui.linear_progress(value=score, show_value=False).classes("flex-grow")
                        ui.label(format_probability(score)).classes("w-16 text-right")

        recommendation = state.recommendation
        if recommendation is not None and not recommendation.error:
            with ui.column().classes("panel w-full p-6 gap-3"):
                ui.label("AI Recommendations").classes("text-xl font-semibold")
                with ui.tabs().classes("w-full") as tabs:
                    primary_tab = ui.tab("Primary Actions")
                    alternative_tab = ui.tab("Alternative")
                    mitigation_tab = ui.tab("Mitigation")
                with ui.tab_panels(tabs, value=primary_tab).classes("w-full"):
                    with ui.tab_panel(primary_tab):
                        render_recommendation_items(recommendation.primary)
                    with ui.tab_panel(alternative_tab):
                        render_recommendation_items(recommendation.alternative)
                    with ui.tab_panel(mitigation_tab):
                        render_recommendation_items(recommendation.mitigation)

        email = state.email_summary
        if email is not None and not email.error:

            def copy_email() -> None:
                ui.clipboard.write(f"{email.subject}\n\n{email.body}")
                ui.notify("Email copied to clipboard", type="positive")

            mailto = f"mailto:?subject={quote(email.subject)}&body={quote(email.body)}"
            with ui.column().classes("panel w-full p-6 gap-3"):
                ui.label("Email Summary").classes("text-xl font-semibold")
                ui.label(email.subject).classes("font-semibold")
                ui.label(email.body).classes("text-sm").style("white-space: pre-wrap")
                with ui.row().classes("gap-3"):
                    ui.button("Copy to Clipboard", on_click=copy_email).props("outline")
                    ui.button(
                        "Send Email", on_click=lambda: ui.navigate.to(mailto, new_tab=True)
                    ).props("unelevated color=indigo")

    @ui.refreshable
    def chat_messages() -> None:
        if not state.chat.messages:
            ui.label("Start a conversation").classes("text-gray-400")
            return
        for msg in state.chat.messages:
            is_user = msg.role is Role.USER
            align = "justify-end" if is_user else "justify-start"
            bubble = "message-user" if is_user else "message-assistant"
            with ui.row().classes(f"w-full {align}"):
                with ui.element("div").classes(f"max-w-[80%] px-4 py-3 {bubble}"):
                    if is_user:
                        ui.label(msg.content).classes("text-sm")
                    elif msg.content:
                        ui.markdown(msg.content).classes("text-sm")
                    elif state.chat.is_streaming:
                        render_typing_indicator()

    async def send_message() -> None:
        text = chat_input.value or ""
        if not text.strip() or state.chat.is_streaming:
            return
        chat_input.value = ""
        await state.send_chat(text)

    # === UI Layout ===
    with ui.column().classes("w-full max-w-7xl mx-auto p-6 gap-6"):
        with ui.column().classes("gap-1"):
            ui.label("AI Prediction & Recommendation Dashboard").classes(
                "text-3xl font-bold"
            )
            ui.label("Smart predictions and recommendations for mining operations").classes(
                "text-gray-500"
            )

        with ui.row().classes("w-full gap-6 no-wrap items-start"):
            # Model selection and inputs
            with ui.column().classes("w-2/5 gap-6"):
                with ui.column().classes("panel w-full p-6 gap-3"):
                    ui.label("Select Model").classes("text-xl font-semibold")
                    model_cards()
                with ui.column().classes("panel w-full p-6 gap-4"):
                    input_form()
                    action_buttons()

            # Results and chat
            with ui.column().classes("w-3/5 gap-6"):
                results()
                with ui.column().classes("panel w-full p-6 gap-3"):
                    with ui.row().classes("w-full items-center justify-between"):
                        ui.label("AI Assistant Chat").classes("text-xl font-semibold")
                        ui.button(icon="add", on_click=state.clear_chat).props("flat round")
                    with ui.scroll_area().classes("w-full h-80 bg-gray-50") as chat_scroll:
                        with ui.column().classes("w-full gap-3 p-2"):
                            chat_messages()
                    with ui.row().classes("w-full gap-2 items-center no-wrap"):
                        chat_input = (
                            ui.input(placeholder=CHAT_PLACEHOLDER)
                            .props("outlined dense")
                            .classes("flex-grow")
                            .on("keydown.enter", send_message)
                        )
                        send_btn = ui.button(icon="send", on_click=send_message).props(
                            "round unelevated color=indigo"
                        )
                        stop_btn = ui.button(icon="stop", on_click=state.cancel_chat).props(
                            "round flat color=negative"
                        )
                        stop_btn.set_visibility(False)

    ui.timer(0.1, state.load_test_data, once=True)
