"""
Agent Call Analytics dashboard.
Run:
    streamlit run streamlit_app.py
"""

import streamlit as st

from calldash.config import CONFIG
from calldash.dashboard.charts import plot_call_duration, plot_hostility_donut, plot_sad_path
from calldash.dashboard.shell import DashboardShell
from calldash.data.defaults import CHART_TITLE, HOSTILITY_TITLE, SAD_PATH_TITLE
from calldash.persistence.factory import build_gateway
from calldash.utils import setup_logging
from calldash.workflow.edit_workflow import WorkflowState

# ---------- Page config & CSS ----------
st.set_page_config(page_title="Agent Call Analytics", layout="wide")
st.markdown(
    """
    <style>
    .status-pill { padding:2px 8px; border-radius:999px; font-size:0.75rem; font-weight:600; color:#fff; }
    .status-on { background:#16a34a; }
    .status-off { background:#dc2626; }
    .small-muted { color: #7a7f87; font-size: 0.9rem; }
    .previous-values { background:#374151; padding:12px; border-radius:8px; max-height:10rem; overflow:auto; }
    </style>
    """,
    unsafe_allow_html=True,
)

# ---------- Shell (one per browser session) ----------
@st.cache_resource
def get_gateway():
    setup_logging(CONFIG.log_level)
    return build_gateway(CONFIG)

if "shell" not in st.session_state:
    with st.spinner("Initializing persistence..."):
        shell = DashboardShell(get_gateway(), confirm_on_fetch_failure=CONFIG.confirm_on_fetch_failure)
        shell.start()
    st.session_state["shell"] = shell

shell: DashboardShell = st.session_state["shell"]
workflow = shell.workflow

# flash messages survive the rerun that follows a save
flash = st.session_state.pop("flash", None)
if flash:
    st.toast(flash)

# ---------- Header ----------
st.title("Agent Call Analytics Dashboard")
pill_class = "status-on" if shell.connected else "status-off"
pill_text = shell.status_label
st.markdown(
    f"Visualizing Voice Agent Performance and User Interactions. "
    f"<span class='status-pill {pill_class}'>{pill_text}</span>",
    unsafe_allow_html=True,
)
st.markdown("---")

# ---------- Edit panel ----------
def render_email_step():
    st.write("Enter your email to save and retrieve your custom chart data.")
    with st.form("email_form"):
        email = st.text_input("Email", value=workflow.key, placeholder="your.email@example.com")
        submitted = st.form_submit_button("Next")
    if submitted:
        workflow.submit_key(email)
        st.rerun()
    if workflow.error:
        st.error(workflow.error)

def render_confirm_step():
    if workflow.previous_unknown:
        st.warning(
            f"Could not check whether data already exists for **{workflow.key}**. "
            "Saving will overwrite anything stored there."
        )
    else:
        st.write(f"We found data for **{workflow.key}**. Overwrite existing data?")
        rows = "".join(f"<div>{d.name}: {d.count}</div>" for d in workflow.previous or [])
        st.markdown(
            f"<div class='previous-values'><strong>Previous Values:</strong>{rows}</div>",
            unsafe_allow_html=True,
        )
        st.markdown("**New Values:**")
        st.write({d.name: d.count for d in workflow.draft})

    c1, c2 = st.columns(2)
    with c1:
        if st.button("Cancel", key="reject_overwrite"):
            workflow.reject_overwrite()
            st.rerun()
    with c2:
        if st.button("Yes, Overwrite", type="primary"):
            workflow.confirm_overwrite()
            st.rerun()

def render_edit_step():
    st.write(f"Edit your chart data for **{workflow.key}**.")
    for index, datum in enumerate(workflow.draft):
        raw = st.text_input(datum.name, value=str(datum.count), key=f"bucket_{index}")
        if raw != str(datum.count):
            workflow.change_field(index, raw)

    if st.button("Save & Apply", type="primary"):
        result = shell.save_edit()
        if result.saved:
            st.session_state["flash"] = "Custom chart data saved successfully!"
            st.rerun()
    if workflow.notification:
        st.error(workflow.notification)

if workflow.is_open:
    with st.container(border=True):
        head, close = st.columns([6, 1])
        with head:
            st.subheader(workflow.title)
        with close:
            if st.button("Close", key="close_modal"):
                shell.close_edit()
                st.rerun()

        if workflow.state is WorkflowState.COLLECTING_KEY:
            render_email_step()
        elif workflow.state is WorkflowState.CONFIRM_OVERWRITE:
            render_confirm_step()
        elif workflow.state is WorkflowState.EDITING:
            render_edit_step()
        else:
            st.info("Working...")

# ---------- Charts ----------
c1, c2, c3 = st.columns(3)
with c1:
    title_col, button_col = st.columns([3, 1])
    with title_col:
        st.subheader(CHART_TITLE)
    with button_col:
        label = "Customize" if shell.ready else "Connecting..."
        if st.button(label, disabled=not shell.edit_enabled):
            shell.open_edit()
            for key in [k for k in st.session_state if str(k).startswith("bucket_")]:
                del st.session_state[key]
            st.rerun()
    st.plotly_chart(plot_call_duration(shell.duration_view()), use_container_width=True)

with c2:
    st.subheader(SAD_PATH_TITLE)
    st.plotly_chart(plot_sad_path(shell.sad_path_view()), use_container_width=True)

with c3:
    st.subheader(HOSTILITY_TITLE)
    st.plotly_chart(plot_hostility_donut(shell.hostility_view()), use_container_width=True)

# small footer
st.markdown("---")
st.caption("Custom call-duration data is stored per email address." if shell.connected
           else "Offline mode: customizations are not saved.")
