import streamlit as st

import qc_core as qc
from export.export_lj_png import export_lj_png
from export.word_reports import ReportMeta, build_qc_report_docx
from services.ai_service import analyze_qc_trends
from utils.statistics import QCStatus, mean_sd_cv


qc.apply_page_config()
qc.inject_global_css()
qc.render_sidebar()
qc.render_global_header()

st.subheader("2️⃣ 📈 Quality Control – Levey–Jennings Charts & Trend Analysis")

lab = qc.get_lab_state()
series = lab["qc_series"]

qc.render_top_info_cards(series)
st.markdown("")

df = series.to_frame()

if df.empty:
    st.warning("No QC data for this session.")
    st.stop()

chart_col, info_col = st.columns([3, 1])

with chart_col:
    chart = qc.create_levey_jennings_chart(
        df,
        title=f"{series.test_name} (Level 1) – Instrument {series.instrument_id}",
    )
    if chart is not None:
        st.altair_chart(chart, use_container_width=True)

with info_col:
    obs_mean, obs_sd, obs_cv = mean_sd_cv(series.values())
    st.markdown("#### 🧮 Observed")
    st.metric("Mean", f"{obs_mean:.2f}", f"{obs_mean - series.mean:+.2f} vs target")
    st.metric("SD", f"{obs_sd:.2f}")
    st.metric("CV%", f"{obs_cv:.2f}")

    st.markdown("#### 🧭 Reading the chart")
    st.markdown(
        "- **Mean (green)**: target value.\n"
        "- **±2SD (amber)**: warning limits.\n"
        "- **±3SD (red)**: rejection limits.\n"
        "- Amber points: > 2SD from mean.\n"
        "- Large red points: > 3SD (out of control)."
    )

with st.expander("🔎 Data used for the chart", expanded=False):
    show = df[["id", "timestamp", "value", "z_score", "status_label", "instrument_id"]].copy()
    show["timestamp"] = show["timestamp"].dt.strftime("%Y-%m-%d")
    st.dataframe(show, use_container_width=True, hide_index=True)

# =====================================================
# AI trend analysis
# =====================================================
st.markdown("### 🧠 AI Trend Analysis")

analysis = lab.get("qc_analysis")
if not analysis:
    st.caption(
        "Use Gemini AI to detect non-random patterns, shifts, or trends in your QC data "
        "that might indicate early instrument failure."
    )
    if st.button("Analyze Recent Data"):
        with st.spinner("Analyzing QC trends..."):
            analysis = analyze_qc_trends(series, api_key=qc.get_api_key(), model=qc.get_ai_model())
        qc.update_lab_state(qc_analysis=analysis)
        qc._rerun()
else:
    st.info(analysis)
    if st.button("Clear Analysis"):
        qc.update_lab_state(qc_analysis=None)
        qc._rerun()

# =====================================================
# Export
# =====================================================
st.markdown("### 🖨️ Export")

exp1, exp2 = st.columns(2)
with exp1:
    try:
        png = export_lj_png(series)
        st.download_button(
            label="⬇️ Levey–Jennings chart (PNG)",
            data=png,
            file_name=f"LJ_{series.test_name.replace(' ', '_')}.png",
            mime="image/png",
        )
    except Exception as e:
        st.error(f"Could not export chart: {e}")

with exp2:
    if st.button("📄 Build QC summary (Word A4)"):
        try:
            docx_buf = build_qc_report_docx(series, meta=ReportMeta(), analysis=lab.get("qc_analysis"))
            st.download_button(
                label="⬇️ Download QC summary (.docx)",
                data=docx_buf,
                file_name=f"QC_summary_{series.test_name.replace(' ', '_')}.docx",
                mime="application/vnd.openxmlformats-officedocument.wordprocessingml.document",
            )
        except Exception as e:
            st.error(f"Could not export Word report: {e}")

n_out = series.count(QCStatus.OUT_OF_CONTROL)
if n_out:
    st.error(f"{n_out} run(s) out of control (> 3SD). Hold patient results and investigate the instrument.")
