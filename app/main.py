"""
Streamlit Frontend for Expense Tracker

A single page where the user adds expenses by:
1. Typing a free-text description that Gemini turns into an expense
2. Speaking the description (voice capture)
3. Filling in the manual form

The expense list lives in st.session_state and disappears with the session.

UI rules:
- The AI button is disabled while a submission is processing
- Every failure is shown with st.error; the page always returns to ready
- Nothing is persisted
"""

import html

import streamlit as st

from expense_tracker.agents import create_gemini_model
from expense_tracker.audit import configure_logging
from expense_tracker.config import get_settings
from expense_tracker.ledger import ExpenseLedger
from expense_tracker.models.expense import CaptureOutcome, ManualExpenseInput
from expense_tracker.orchestrator import (
    ExpenseCaptureFlow,
    connect_voice,
    create_app_components,
    run_async,
)
from expense_tracker.services.speech import (
    MicrophonePermissionError,
    SpeechUnavailableError,
)
from expense_tracker.voice import VoiceCapture


# Page configuration
st.set_page_config(
    page_title="Expense Tracker With AI Voice",
    page_icon="💸",
    layout="centered",
    initial_sidebar_state="expanded",
)

# Custom CSS for the expense list
st.markdown("""
<style>
    .expense-row {
        display: grid;
        grid-template-columns: 1fr auto auto;
        align-items: center;
        gap: 12px;
        padding: 10px;
        margin-bottom: 8px;
        background-color: #f5f5f5;
        border-left: 4px solid #4CAF50;
        border-radius: 4px;
        font-size: 14px;
    }
    .expense-title {
        font-weight: 600;
        margin-bottom: 2px;
    }
    .expense-desc {
        font-size: 12px;
        color: #666;
    }
    .expense-amount {
        text-align: right;
        font-weight: 600;
        color: #2196F3;
    }
    .expense-date {
        font-size: 12px;
        color: #999;
        min-width: 80px;
        text-align: right;
    }
</style>
""", unsafe_allow_html=True)


RECORDER_SUPPORTED = hasattr(st, "audio_input")


@st.cache_resource
def init_logging() -> bool:
    configure_logging(debug=get_settings().app.debug_mode)
    return True


@st.cache_resource
def get_shared_model():
    """One Gemini model for the whole process (cached)."""
    return create_gemini_model()


def _remember_voice_outcome(outcome: CaptureOutcome) -> None:
    st.session_state.voice_outcome = outcome


def get_components() -> tuple[ExpenseCaptureFlow, VoiceCapture]:
    """Get or create this session's capture flow and voice capture."""
    if "capture_flow" not in st.session_state:
        flow, voice = create_app_components(
            model=get_shared_model(),
            recorder_supported=RECORDER_SUPPORTED,
        )
        connect_voice(voice, flow, on_outcome=_remember_voice_outcome)
        st.session_state.capture_flow = flow
        st.session_state.voice_capture = voice
    return st.session_state.capture_flow, st.session_state.voice_capture


def init_session_state() -> None:
    defaults = {
        "ai_input": "",
        "ai_loading": False,
        "ai_pending": None,
        "ai_outcome": None,
        "voice_round": 0,
        "voice_outcome": None,
    }
    for key, value in defaults.items():
        if key not in st.session_state:
            st.session_state[key] = value


def main():
    """Main application entry point."""
    init_logging()
    init_session_state()
    flow, voice = get_components()

    st.sidebar.title("💸 Expense Tracker")
    st.sidebar.markdown("---")

    page = st.sidebar.radio(
        "Navigate to:",
        ["🤖 Add With AI", "🎤 Voice", "✍️ Manual Entry", "⚙️ Settings"],
        index=0,
    )

    st.sidebar.markdown("---")
    st.sidebar.markdown(
        """
        **Try saying or typing:**
        - "100 rupees biryani"
        - "Paid 450 for an Uber to the airport yesterday"
        """
    )

    if page == "🤖 Add With AI":
        render_ai_page(flow)
    elif page == "🎤 Voice":
        render_voice_page(voice)
    elif page == "✍️ Manual Entry":
        render_manual_page(flow)
    elif page == "⚙️ Settings":
        render_settings_page()
        return

    render_expense_list(flow.ledger)


def show_outcome(outcome: CaptureOutcome) -> None:
    if outcome is None or outcome.ignored:
        return
    if outcome.succeeded:
        record = outcome.record
        symbol = get_settings().app.currency_symbol
        st.success(f"✅ Added {record.title} ({symbol}{record.amount:g})")
    elif outcome.message:
        st.error(outcome.message)


def render_ai_page(flow: ExpenseCaptureFlow):
    """Render the free-text AI entry page."""
    st.title("Expense Tracker With Ai-Voice")

    # Cleared only after a successful addition, before the widget exists
    if st.session_state.pop("clear_ai_input", False):
        st.session_state.ai_input = ""

    loading = st.session_state.ai_loading

    st.text_input(
        "Describe your expense",
        key="ai_input",
        placeholder="e.g. 100 rupees biryani, or say it aloud",
        disabled=loading,
    )

    if st.button(
        "Processing..." if loading else "Add Expense With AI",
        type="primary",
        disabled=loading,
    ):
        st.session_state.ai_pending = st.session_state.ai_input
        st.session_state.ai_outcome = None
        st.session_state.ai_loading = True
        st.rerun()

    if loading:
        outcome = None
        with st.spinner("Processing..."):
            try:
                outcome = run_async(flow.submit_text(st.session_state.ai_pending))
            finally:
                st.session_state.ai_loading = False
                st.session_state.ai_pending = None

        st.session_state.ai_outcome = outcome
        if outcome is not None and outcome.succeeded:
            st.session_state.clear_ai_input = True
        st.rerun()

    show_outcome(st.session_state.ai_outcome)


def render_voice_page(voice: VoiceCapture):
    """Render the voice capture page."""
    st.title("🎤 Say Your Expense")
    st.markdown("Start listening, record one sentence, and it is added automatically.")

    col1, col2 = st.columns(2)

    with col1:
        if st.button("🎙️ Start Listening", type="primary", disabled=voice.is_listening):
            try:
                voice.start()
                st.session_state.voice_round += 1
                st.session_state.voice_outcome = None
                st.rerun()
            except SpeechUnavailableError:
                st.error(
                    "❌ Voice capture isn't supported in this browser.\n\n"
                    "Please type your expense on the 'Add With AI' page instead."
                )
            except MicrophonePermissionError as e:
                st.error(
                    "🎤 Microphone access denied!\n\n"
                    "Please allow microphone access in your browser and try again.\n\n"
                    f"Details: {e}"
                )

    with col2:
        if st.button("⏹️ Stop", disabled=not voice.is_listening):
            voice.stop()
            st.rerun()

    if voice.is_listening:
        st.info(f"🎤 Listening ({voice.backend.language})...")
        clip = st.audio_input(
            "Record your expense",
            key=f"voice_clip_{st.session_state.voice_round}",
        )
        if clip is not None:
            with st.spinner("Processing..."):
                voice.backend.feed_clip(clip.getvalue())
            st.rerun()

    if voice.last_error is not None:
        st.error(f"❌ Speech recognition failed. Please try again.\n\nError: {voice.last_error}")

    show_outcome(st.session_state.voice_outcome)


def render_manual_page(flow: ExpenseCaptureFlow):
    """Render the manual entry form."""
    st.title("✍️ Add Expense")

    with st.form("manual_expense", clear_on_submit=True):
        title = st.text_input("Title *")
        description = st.text_input("Description")
        amount = st.number_input("Amount *", min_value=0.0, step=1.0, format="%.2f")
        expense_date = st.date_input("Date *")
        submitted = st.form_submit_button("Add Expense", type="primary")

    if submitted:
        if not title.strip():
            st.error("Please enter a title")
            return
        entry = ManualExpenseInput(
            title=title,
            description=description,
            amount=amount,
            expense_date=expense_date,
        )
        show_outcome(flow.add_manual(entry))


def render_expense_list(ledger: ExpenseLedger):
    """Render the session's expenses."""
    st.markdown("---")
    st.header("Expenses")

    if not ledger:
        st.markdown("No expenses yet.")
        return

    symbol = html.escape(get_settings().app.currency_symbol)
    rows = []
    for record in ledger:
        rows.append(f"""
        <div class="expense-row">
            <div>
                <div class="expense-title">{html.escape(record.title)}</div>
                <div class="expense-desc">{html.escape(record.description)}</div>
            </div>
            <div class="expense-amount">{symbol}{record.amount:g}</div>
            <div class="expense-date">{html.escape(record.date)}</div>
        </div>
        """)
    st.markdown("".join(rows), unsafe_allow_html=True)
    st.caption(f"Total: {get_settings().app.currency_symbol}{ledger.total:g}")


def render_settings_page():
    """Render the settings page."""
    st.title("⚙️ Settings")

    st.markdown("### Connection Status")

    from expense_tracker.config import validate_all_settings

    status = validate_all_settings()

    services = [
        ("Gemini (AI)", "gemini"),
        ("Speech Recognition", "speech"),
        ("Application", "app"),
    ]

    for name, key in services:
        if status.get(key, False):
            st.success(f"✅ {name} - Configured")
        else:
            error = status.get(f"{key}_error", "Not configured")
            st.error(f"❌ {name} - {error}")

    if not RECORDER_SUPPORTED:
        st.warning("This Streamlit version has no audio recorder; voice capture is disabled.")

    st.markdown("---")
    st.markdown("### Configuration")
    st.markdown(
        "To configure the application, create a `.env` file with your API key. "
        "See `.env.example` for the available variables."
    )


if __name__ == "__main__":
    main()
