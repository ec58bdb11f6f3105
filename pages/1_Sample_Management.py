import time

import numpy as np
import pandas as pd
import streamlit as st

import qc_core as qc
from utils.samples import (
    SAMPLE_TYPES,
    SampleStatus,
    create_sample,
    custody_timeline,
    filter_samples,
    find_patient,
    simulate_barcode_scan,
)


qc.apply_page_config()
qc.inject_global_css()
qc.render_sidebar()
qc.render_global_header()

st.subheader("1️⃣ 🧫 Sample Management")

lab = qc.get_lab_state()
samples = lab["samples"]
patients = lab["patients"]

if "sample_rng" not in st.session_state:
    st.session_state["sample_rng"] = np.random.default_rng()
rng = st.session_state["sample_rng"]

flash = st.session_state.pop("sample_flash", None)
if flash:
    st.success(flash)

# Thanh công cụ: tìm kiếm + lọc + quét barcode
tool1, tool2, tool3 = st.columns([4, 2, 1])
with tool3:
    st.markdown("<div style='height:1.75rem'></div>", unsafe_allow_html=True)
    if st.button("📷 Scan", use_container_width=True):
        with st.spinner("Scanning barcode..."):
            time.sleep(0.8)
            scanned = simulate_barcode_scan(samples, rng)
        if scanned:
            st.session_state["sample_search"] = scanned
with tool1:
    search = st.text_input(
        "Search",
        key="sample_search",
        placeholder="Search by barcode, ID, or patient name...",
    )
with tool2:
    status_options = ["All"] + [s.value for s in SampleStatus]
    status_choice = st.selectbox("Status", status_options, index=0)

status_filter = None if status_choice == "All" else SampleStatus(status_choice)
filtered = filter_samples(samples, patients, search=search, status=status_filter)

rows = []
for s in filtered:
    p = find_patient(patients, s.patient_id)
    rows.append(
        {
            "Sample ID": s.id,
            "Barcode": s.barcode,
            "Patient": p.name if p else s.patient_id,
            "MRN": p.mrn if p else "",
            "Type": s.sample_type,
            "Collected": s.collection_date.strftime("%Y-%m-%d %H:%M"),
            "Status": s.status.value,
        }
    )

st.caption(f"{len(filtered)} of {len(samples)} samples")
if rows:
    st.dataframe(pd.DataFrame(rows), use_container_width=True, hide_index=True)
else:
    st.info("No samples match the current search / filter.")

left, right = st.columns(2)

with left:
    st.markdown("### 🧭 Chain of custody")
    if filtered:
        sample_id = st.selectbox("Sample", [s.id for s in filtered])
        selected = next(s for s in filtered if s.id == sample_id)
        p = find_patient(patients, selected.patient_id)
        st.markdown(
            f"**{selected.id}** · `{selected.barcode}` · {qc.status_pill(selected.status)}  \n"
            f"Patient: **{p.name if p else selected.patient_id}** "
            f"({p.mrn if p else '—'}, DOB {p.dob.isoformat() if p else '—'})",
            unsafe_allow_html=True,
        )
        for ev in custody_timeline(selected):
            st.markdown(
                f"- {qc.status_pill(ev.status)} &nbsp; {ev.at.strftime('%b %d, %H:%M')} – _{ev.actor}_",
                unsafe_allow_html=True,
            )
    else:
        st.caption("Select a sample to view its custody timeline.")

with right:
    st.markdown("### ➕ Register new sample")
    with st.form("new_sample_form", clear_on_submit=True):
        patient_labels = {f"{p.name} ({p.mrn})": p for p in patients}
        patient_label = st.selectbox("Patient", list(patient_labels.keys()))
        sample_type = st.selectbox("Sample type", SAMPLE_TYPES, index=0)
        init_status = st.selectbox("Initial status", [s.value for s in SampleStatus], index=0)
        submitted = st.form_submit_button("Register sample")

    if submitted:
        patient = patient_labels[patient_label]
        samples = create_sample(samples, patient, sample_type, SampleStatus(init_status), rng)
        qc.update_lab_state(samples=samples)
        st.session_state["sample_flash"] = (
            f"Registered {samples[0].id} · barcode `{samples[0].barcode}` for {patient.name}."
        )
        qc._rerun()
