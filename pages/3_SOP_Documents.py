import streamlit as st

import qc_core as qc
from export.word_reports import ReportMeta, build_sop_docx
from services.ai_service import generate_sop_draft
from utils.documents import add_document, new_draft, preview
from utils.mock_data import SOP_EXAMPLE_PROMPTS


qc.apply_page_config()
qc.inject_global_css()
qc.render_sidebar()
qc.render_global_header()

st.subheader("3️⃣ 📄 SOP Documents")

lab = qc.get_lab_state()
documents = lab["documents"]

flash = st.session_state.pop("doc_flash", None)
if flash:
    st.success(flash)

tab_list, tab_draft = st.tabs(["📚 Library", "✨ Draft with AI"])

with tab_list:
    if not documents:
        st.info("No documents yet.")
    for doc in documents:
        with st.container(border=True):
            st.markdown(
                f"**{doc.title}** &nbsp; "
                f"<span class='qc-pill' style='background:{'#15803D' if doc.status == 'Approved' else '#A16207'};'>"
                f"{doc.status}</span>  \n"
                f"<span style='font-size:0.8rem;color:#6B7280;'>{doc.id} · Version {doc.version} · "
                f"Last updated {doc.last_updated.isoformat()}</span>",
                unsafe_allow_html=True,
            )
            st.caption(preview(doc.content))
            with st.expander("Read full SOP"):
                st.text(doc.content)
                try:
                    st.download_button(
                        label="⬇️ Export to Word",
                        data=build_sop_docx(doc, ReportMeta()),
                        file_name=f"{doc.id}.docx",
                        mime="application/vnd.openxmlformats-officedocument.wordprocessingml.document",
                        key=f"dl_{doc.id}",
                    )
                except Exception as e:
                    st.error(f"Could not export Word: {e}")

with tab_draft:
    st.caption("Describe the procedure you need an SOP for, and Gemini will generate a compliant draft structure.")

    st.markdown("**Quick start examples**")
    ex_cols = st.columns(len(SOP_EXAMPLE_PROMPTS))
    for col, (label, title, context) in zip(ex_cols, SOP_EXAMPLE_PROMPTS):
        with col:
            if st.button(label, use_container_width=True, key=f"ex_{label}"):
                st.session_state["draft_title"] = title
                st.session_state["draft_context"] = context

    with st.form("sop_draft_form"):
        title = st.text_input("Document title", key="draft_title",
                              placeholder="e.g., Daily Hematology Calibration")
        context = st.text_area("Context / specific requirements", key="draft_context", height=140)
        submitted = st.form_submit_button("✨ Generate draft")

    if submitted:
        if not title.strip() or not context.strip():
            st.warning("Please enter both a title and the context.")
        else:
            with st.spinner("Generating SOP draft..."):
                content = generate_sop_draft(
                    title, context, api_key=qc.get_api_key(), model=qc.get_ai_model()
                )
            doc = new_draft(title, content)
            qc.update_lab_state(documents=add_document(documents, doc))
            st.session_state["doc_flash"] = f"Draft {doc.id} added to the library."
            qc._rerun()
