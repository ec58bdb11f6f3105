import streamlit as st

import qc_core as qc


qc.apply_page_config()
qc.inject_global_css()
qc.render_sidebar()
qc.render_global_header()

st.subheader("4️⃣ 📘 Guide & About")

st.markdown("### 📚 Suggested workflow")

st.markdown(
    """
1. **🧫 Sample Management (page 1)**
   - Search by barcode, sample ID or patient name; filter by status.
   - **Scan** simulates a barcode reader.
   - Register new samples and follow the chain of custody
     (Collected → Received → Processing → Analyzed → Archived).

2. **📈 QC Charts (page 2)**
   - Daily control results are plotted on a Levey–Jennings chart (Mean, ±1/2/3 SD).
   - Each point is classified from its distance to the target mean:
     - **In Control**: ≤ 2 SD
     - **Warning**: > 2 SD and ≤ 3 SD
     - **Out of Control**: > 3 SD
   - **Analyze Recent Data** asks Gemini to look for shifts, trends and rule violations.
   - Export the chart (PNG) or a QC summary (Word A4).

3. **📄 SOP Documents (page 3)**
   - Read approved / draft procedures, export them to Word.
   - **Draft with AI** generates a new SOP skeleton (status *Draft*, version *0.1-DRAFT*).
"""
)

st.markdown("### ⚙️ Configuration")
st.markdown(
    """
Settings are read from `.streamlit/secrets.toml` (all optional):

```toml
[gemini]
api_key = "..."            # or env GEMINI_API_KEY / API_KEY
model = "gemini-2.5-flash"

[qc]
window_days = 30
base_mean = 100
sd = 5
drift_start_day = 25
drift_rate_per_day = 3
test_name = "Hemoglobin A1c"
instrument_id = "INST-01"
seed = 42                  # omit for a random series each session
```

The sidebar **QC data generator** overrides these for the current session.
"""
)

st.markdown("### ℹ️ About")
st.info(
    "Demo data only – patients, samples and QC runs are simulated and kept in the browser "
    "session. Nothing is persisted; reloading the page starts a new session. "
    "The classification shown here is a single-point ±2SD / ±3SD check, not a full "
    "Westgard multi-rule evaluation."
)
