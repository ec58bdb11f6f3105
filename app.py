import streamlit as st

import qc_core as qc
from utils.samples import count_in_process
from utils.statistics import STATUS_LABELS, QCStatus


qc.apply_page_config()
qc.inject_global_css()

qc.render_sidebar()
lab = qc.get_lab_state()
series = lab["qc_series"]
samples = lab["samples"]
documents = lab["documents"]

qc.render_global_header()

st.markdown("### 📊 Laboratory Overview")

c1, c2, c3, c4 = st.columns(4)
qc.render_stat_card(c1, "🧫 Samples in Process", count_in_process(samples))
qc.render_stat_card(
    c2,
    f"🚨 QC Alerts ({len(series)}d)",
    series.count(QCStatus.OUT_OF_CONTROL),
    f"{series.count(QCStatus.WARNING)} warning",
)
qc.render_stat_card(c3, "🔬 Instruments Active", 4)
qc.render_stat_card(
    c4,
    "📝 Pending Reviews",
    sum(1 for d in documents if d.status == "Draft"),
    "SOP drafts",
)

st.markdown("")

st.markdown("### ⚡ Quick actions")
qa1, qa2, qa3, qa4 = st.columns(4)
with qa1:
    st.page_link("pages/1_Sample_Management.py", label="Register sample", icon="🧫")
with qa2:
    st.page_link("pages/2_QC_Charts.py", label="Levey–Jennings", icon="📈")
with qa3:
    st.page_link("pages/3_SOP_Documents.py", label="SOP documents", icon="📄")
with qa4:
    st.page_link("pages/4_Guide_and_About.py", label="Guide", icon="📘")

col1, col2 = st.columns([3, 2])

with col1:
    st.markdown(f"#### 📈 {series.test_name} – last 10 runs")
    recent = series.tail(10)
    chart = qc.create_levey_jennings_chart(
        recent.to_frame(),
        title=f"{series.test_name} ({series.instrument_id})",
        y_span_sd=3.5,
        show_all_bands=False,
    )
    if chart is not None:
        st.altair_chart(chart, use_container_width=True)
    else:
        st.info("No QC data yet.")

with col2:
    st.markdown("#### 🧷 Recent QC alerts")
    alerts = series.alerts(QCStatus.OUT_OF_CONTROL)
    if alerts:
        for o in reversed(alerts):
            st.markdown(
                f"{qc.status_pill(o.status)} &nbsp; **{o.test_name}** – "
                f"{o.timestamp.strftime('%b %d')}: value `{o.value:.2f}` "
                f"({(o.value - o.mean) / o.sd:+.1f} SD, {o.instrument_id})",
                unsafe_allow_html=True,
            )
        st.page_link("pages/2_QC_Charts.py", label="Review on QC Charts", icon="➡️")
    else:
        st.success(f"All systems normal – no {STATUS_LABELS[QCStatus.OUT_OF_CONTROL].lower()} runs.")

    warnings = [o for o in series if o.status == QCStatus.WARNING]
    if warnings:
        st.caption(
            f"{len(warnings)} warning point(s) beyond 2SD: "
            + ", ".join(o.timestamp.strftime("%b %d") for o in warnings)
        )
