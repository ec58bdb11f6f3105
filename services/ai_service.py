"""
Trợ lý AI (Google Gemini) cho dashboard: tóm tắt xu hướng QC và soạn nháp SOP.

Mọi lỗi (thiếu key, mạng, SDK) được ghi log và trả về dưới dạng thông báo cho UI,
không bao giờ raise lên trang Streamlit.
"""
import logging
import os

from utils.statistics import STATUS_LABELS

# Optional dependency (chỉ cần khi bật AI)
try:
    from google import genai  # type: ignore
except Exception:  # pragma: no cover
    genai = None

logger = logging.getLogger(__name__)

DEFAULT_MODEL = "gemini-2.5-flash"

MSG_NO_KEY_ANALYSIS = "API Key not configured. Unable to perform AI analysis."
MSG_NO_KEY = "API Key not configured."
MSG_EMPTY_ANALYSIS = "No analysis generated."
MSG_EMPTY_DRAFT = "No draft generated."
MSG_ERR_ANALYSIS = "Error generating analysis. Please check your API key and connection."
MSG_ERR_DRAFT = "Error generating SOP. Please check your API key."


def resolve_api_key(secrets=None) -> str:
    """secrets['gemini']['api_key'] -> GEMINI_API_KEY -> API_KEY -> ''."""
    try:
        if secrets is not None:
            key = (secrets.get("gemini", {}) or {}).get("api_key")
            if key:
                return str(key)
    except Exception:
        # st.secrets raise khi không có secrets.toml
        logger.debug("No gemini section in secrets")
    return (os.environ.get("GEMINI_API_KEY") or os.environ.get("API_KEY") or "").strip()


def make_client(api_key: str):
    if genai is None:
        raise RuntimeError("Missing dependency: google-genai (pip install google-genai)")
    return genai.Client(api_key=api_key)


def build_qc_trend_prompt(series) -> str:
    data_summary = "\n".join(
        f"Date: {o.timestamp.isoformat()}, Value: {o.value}, Status: {STATUS_LABELS[o.status]}"
        for o in series
    )
    return f"""
    You are a Quality Control expert in a clinical pathology laboratory.
    Analyze the following quality control data points for {series.test_name}.
    Mean is {series.mean:g}, SD is {series.sd:g}.

    Data:
    {data_summary}

    Identify any Levey-Jennings rules that are violated (e.g., 1-3s, 2-2s, R-4s, shift, trend).
    Provide a concise summary of the instrument status and 3 actionable recommendations.
    Do not use markdown formatting heavily, keep it plain text or simple bullets.
    """


def build_sop_prompt(title: str, context: str) -> str:
    return f"""
    Create a detailed Standard Operating Procedure (SOP) for a medical laboratory.
    Title: {title}
    Context/Specific Requirements: {context}

    Format the output with the following sections:
    1. Purpose
    2. Scope
    3. Materials/Equipment
    4. Procedure (Step-by-step)
    5. Safety Precautions

    Make it professional, compliant with CLIA/CAP standards, and ready for review.
    """


def _generate(client, prompt: str, model: str) -> str:
    response = client.models.generate_content(model=model, contents=prompt)
    return getattr(response, "text", None) or ""


def analyze_qc_trends(series, client=None, api_key=None, model: str = DEFAULT_MODEL) -> str:
    if client is None:
        if not api_key:
            return MSG_NO_KEY_ANALYSIS
        try:
            client = make_client(api_key)
        except Exception:
            logger.exception("Could not create Gemini client")
            return MSG_ERR_ANALYSIS

    prompt = build_qc_trend_prompt(series)
    try:
        text = _generate(client, prompt, model)
    except Exception:
        logger.exception("Gemini API error while analysing %d QC points", len(series))
        return MSG_ERR_ANALYSIS
    logger.info("QC trend analysis generated (%d chars)", len(text))
    return text or MSG_EMPTY_ANALYSIS


def generate_sop_draft(title: str, context: str, client=None, api_key=None, model: str = DEFAULT_MODEL) -> str:
    if client is None:
        if not api_key:
            return MSG_NO_KEY
        try:
            client = make_client(api_key)
        except Exception:
            logger.exception("Could not create Gemini client")
            return MSG_ERR_DRAFT

    prompt = build_sop_prompt(title, context)
    try:
        text = _generate(client, prompt, model)
    except Exception:
        logger.exception("Gemini API error while drafting SOP %r", title)
        return MSG_ERR_DRAFT
    logger.info("SOP draft generated for %r (%d chars)", title, len(text))
    return text or MSG_EMPTY_DRAFT
