import os
import json
import logging

import altair as alt
import numpy as np
import pandas as pd

import streamlit as st

from services.ai_service import DEFAULT_MODEL, resolve_api_key
from utils.mock_data import MOCK_DOCUMENTS, MOCK_PATIENTS, MOCK_SAMPLES
from utils.qc_series import SeriesConfig
from utils.samples import SampleStatus
from utils.statistics import STATUS_LABELS, InvalidParameter, QCStatus

logger = logging.getLogger(__name__)


def configure_logging():
    """Gọi 1 lần ở đầu mỗi page (force=True để Streamlit rerun không nhân đôi handler)."""
    level = os.environ.get("PATHOQC_LOG_LEVEL", "INFO").upper()
    logging.basicConfig(
        level=getattr(logging, level, logging.INFO),
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        force=True,
    )


def _secrets_section(name: str) -> dict:
    """Đọc 1 section trong st.secrets; không có secrets.toml -> {}."""
    try:
        return dict(st.secrets.get(name, {}) or {})
    except Exception:
        return {}


def load_series_config() -> SeriesConfig:
    try:
        return SeriesConfig.from_mapping(_secrets_section("qc"))
    except (TypeError, ValueError):
        logger.warning("Invalid [qc] secrets section, using defaults", exc_info=True)
        return SeriesConfig()


def get_api_key() -> str:
    return resolve_api_key({"gemini": _secrets_section("gemini")})


def get_ai_model() -> str:
    return _secrets_section("gemini").get("model") or DEFAULT_MODEL


def _rerun():
    """Tương thích nhiều phiên bản Streamlit."""
    if hasattr(st, "rerun"):
        st.rerun()
    elif hasattr(st, "experimental_rerun"):
        st.experimental_rerun()


# =====================================================
# CẤU HÌNH CHUNG & GIAO DIỆN (Teal)
# - Màu quản lý tập trung, có thể ghi đè bằng assets/theme.json
# =====================================================

def apply_page_config():
    st.set_page_config(
        page_title="PathoQC – Laboratory Dashboard",
        page_icon="🧪",
        layout="wide",
    )
    configure_logging()


THEME_DEFAULT = {
    "bg": "#F9FAFB",
    "panel": "#FFFFFF",
    "accent": "#0D9488",
    "accentHover": "#0F766E",
    "accentSoft": "rgba(13, 148, 136, 0.12)",
    "text": "#1F2937",
    "text2": "#6B7280",
    "mean": "#10b981",
    "point": "#3b82f6",
    "warning": "#f59e0b",
    "error": "#ef4444",
    "border": "rgba(17, 24, 39, 0.08)",
    "shadow": "rgba(15, 23, 42, 0.08)",
    "chartBg": "#FFFFFF",
    "grid": "#e5e7eb",
}


def get_theme() -> dict:
    """Đọc theme từ JSON (nếu có), cache trong session_state."""
    if "qc_theme" in st.session_state and isinstance(st.session_state["qc_theme"], dict):
        return st.session_state["qc_theme"]

    theme_path = os.path.join("assets", "theme.json")
    theme = dict(THEME_DEFAULT)
    try:
        if os.path.exists(theme_path):
            with open(theme_path, "r", encoding="utf-8") as f:
                user_theme = json.load(f)
            if isinstance(user_theme, dict):
                theme.update({k: v for k, v in user_theme.items() if v})
    except (OSError, ValueError):
        logger.warning("Could not read %s, using default theme", theme_path)
        theme = dict(THEME_DEFAULT)

    st.session_state["qc_theme"] = theme
    return theme


STATUS_COLORS = {
    QCStatus.IN_CONTROL: THEME_DEFAULT["point"],
    QCStatus.WARNING: THEME_DEFAULT["warning"],
    QCStatus.OUT_OF_CONTROL: THEME_DEFAULT["error"],
}

SAMPLE_STATUS_COLORS = {
    SampleStatus.COLLECTED: "#6B7280",
    SampleStatus.RECEIVED: "#1D4ED8",
    SampleStatus.PROCESSING: "#A16207",
    SampleStatus.ANALYZED: "#15803D",
    SampleStatus.ARCHIVED: "#7E22CE",
}


def inject_global_css():
    t = get_theme()
    css = f"""
    <style>
      :root {{
        --qc-bg: {t['bg']};
        --qc-panel: {t['panel']};
        --qc-accent: {t['accent']};
        --qc-accent-hover: {t['accentHover']};
        --qc-accent-soft: {t['accentSoft']};
        --qc-text: {t['text']};
        --qc-text2: {t['text2']};
        --qc-border: {t['border']};
        --qc-shadow: {t['shadow']};
      }}

      /* Ẩn menu multipage mặc định (dùng menu riêng ở sidebar) */
      [data-testid="stSidebarNav"] {{ display: none; }}

      [data-testid="stAppViewContainer"] > .main {{ background: var(--qc-bg) !important; }}
      .block-container {{
        padding-top: 1.1rem !important;
        padding-bottom: 2.6rem !important;
        max-width: 1280px !important;
      }}

      [data-testid="stSidebar"] {{
        background: var(--qc-panel) !important;
        border-right: 1px solid var(--qc-border) !important;
      }}

      .qc-nav [data-testid="stPageLink"] a {{
        border-radius: 10px;
        padding: 0.55rem 0.85rem;
        display: block;
        color: var(--qc-text) !important;
        margin-bottom: 0.25rem;
      }}
      .qc-nav [data-testid="stPageLink"] a:hover {{ background: rgba(17,24,39,0.04); }}
      .qc-nav [data-testid="stPageLink"] a[aria-current="page"] {{
        background: var(--qc-accent-soft) !important;
        color: var(--qc-accent-hover) !important;
        font-weight: 700;
      }}

      /* Header chính */
      .qc-header {{
        margin-top: 0.5rem;
        margin-bottom: 1.2rem;
        padding: 0.9rem 1.1rem;
        border-radius: 16px;
        border: 1px solid var(--qc-border);
        background: linear-gradient(135deg, #ffffff 0%, var(--qc-accent-soft) 120%);
        box-shadow: 0 10px 24px var(--qc-shadow);
      }}
      .qc-header h1 {{ margin: 0; font-size: 1.3rem; color: var(--qc-text); }}
      .qc-header p {{ margin: 0.3rem 0 0; font-size: 0.9rem; color: var(--qc-text2); }}
      .qc-badge {{
        display:inline-block;
        padding:0.15rem 0.6rem;
        font-size:0.72rem;
        border-radius:999px;
        background: var(--qc-accent-soft);
        color: var(--qc-accent-hover);
        margin-bottom:0.4rem;
      }}

      /* Cards */
      .qc-card {{
        background: var(--qc-panel);
        border-radius: 14px;
        padding: 1rem 1.1rem;
        border: 1px solid var(--qc-border);
        box-shadow: 0 4px 12px var(--qc-shadow);
      }}
      .qc-card-title {{
        font-size: 0.75rem;
        text-transform: uppercase;
        letter-spacing: 0.06em;
        color: var(--qc-text2);
        margin-bottom: 0.25rem;
      }}
      .qc-card-value {{ font-size: 1.5rem; font-weight: 700; color: var(--qc-text); }}
      .qc-card-sub {{ margin-top:0.15rem; font-size:0.8rem; color: var(--qc-text2); }}

      .qc-pill {{
        display:inline-block;
        border-radius: 999px;
        padding: 0.1rem 0.55rem;
        font-size: 0.75rem;
        font-weight: 600;
        color: #ffffff;
      }}

      div.stButton > button {{
        border-radius: 10px !important;
        background: var(--qc-accent) !important;
        color: #ffffff !important;
        border: 1px solid var(--qc-accent) !important;
        font-weight: 600 !important;
      }}
      div.stButton > button:hover {{ background: var(--qc-accent-hover) !important; }}

      [data-testid="stDataFrame"] {{
        border-radius: 12px;
        overflow: hidden;
        border: 1px solid var(--qc-border);
      }}
    </style>
    """
    st.markdown(css, unsafe_allow_html=True)


# =====================================================
# STATE (session_state – mất khi reload, không lưu DB)
# =====================================================


def _init_lab_state():
    """Khởi tạo state của phiên làm việc: bệnh nhân, mẫu, SOP, chuỗi QC."""
    if "lab" not in st.session_state:
        st.session_state["lab"] = {
            "patients": list(MOCK_PATIENTS),
            "samples": list(MOCK_SAMPLES),
            "documents": list(MOCK_DOCUMENTS),
            "series_config": load_series_config(),
            "qc_series": None,
            "qc_analysis": None,
        }
    lab = st.session_state["lab"]

    # Chuỗi QC sinh 1 lần / phiên
    if lab.get("qc_series") is None:
        cfg = lab["series_config"]
        try:
            lab["qc_series"] = cfg.generate()
        except InvalidParameter as e:
            logger.warning("Invalid QC generator settings (%s), falling back to defaults", e)
            lab["series_config"] = SeriesConfig()
            lab["qc_series"] = lab["series_config"].generate()
        logger.info(
            "QC series generated: %d points for %s", len(lab["qc_series"]), lab["series_config"].test_name
        )
    return lab


def get_lab_state() -> dict:
    return _init_lab_state()


def update_lab_state(**kwargs):
    lab = _init_lab_state()
    lab.update(kwargs)
    st.session_state["lab"] = lab


def reset_qc_series(series_config: SeriesConfig):
    """Sinh lại chuỗi QC với cấu hình mới (xóa nhận định AI cũ)."""
    update_lab_state(series_config=series_config, qc_series=None, qc_analysis=None)
    return _init_lab_state()["qc_series"]


# =====================================================
# SIDEBAR & HEADER
# =====================================================


def render_sidebar():
    """
    Sidebar dùng chung cho tất cả pages: menu, cấu hình bộ sinh dữ liệu QC, người dùng.
    Trả về SeriesConfig đang dùng.
    """
    lab = _init_lab_state()
    cfg = lab["series_config"]

    with st.sidebar:
        logo_path = "assets/logo.png"
        if os.path.exists(logo_path):
            st.image(logo_path, width=120)
        else:
            st.markdown("## 🧪 PathoQC")

        st.markdown('<div class="qc-nav">', unsafe_allow_html=True)
        st.page_link("app.py", label="Dashboard", icon="🏠")
        st.page_link("pages/1_Sample_Management.py", label="Sample Management", icon="🧫")
        st.page_link("pages/2_QC_Charts.py", label="QC Charts", icon="📈")
        st.page_link("pages/3_SOP_Documents.py", label="SOP Documents", icon="📄")
        st.page_link("pages/4_Guide_and_About.py", label="Guide", icon="📘")
        st.markdown("</div>", unsafe_allow_html=True)

        st.markdown("---")
        with st.expander("🎚️ QC data generator", expanded=False):
            window_days = st.number_input("Window (days)", min_value=1, max_value=365,
                                          value=int(cfg.window_days), step=1)
            base_mean = st.number_input("Target mean", value=float(cfg.base_mean), step=1.0)
            sd = st.number_input("SD", min_value=0.01, value=float(cfg.sd), step=0.5)
            drift_start_day = st.number_input("Drift starts after day", min_value=0,
                                              value=int(cfg.drift_start_day), step=1)
            drift_rate = st.number_input("Drift per day", value=float(cfg.drift_rate_per_day), step=0.5)
            seed_txt = st.text_input("Seed (empty = random)",
                                     value="" if cfg.seed is None else str(cfg.seed))

            if st.button("🔄 Regenerate QC data", use_container_width=True):
                try:
                    new_cfg = SeriesConfig.from_mapping({
                        "window_days": window_days,
                        "base_mean": base_mean,
                        "sd": sd,
                        "drift_start_day": drift_start_day,
                        "drift_rate_per_day": drift_rate,
                        "test_name": cfg.test_name,
                        "instrument_id": cfg.instrument_id,
                        "seed": seed_txt.strip(),
                    })
                    reset_qc_series(new_cfg)
                    _rerun()
                except (InvalidParameter, ValueError) as e:
                    st.error(f"Invalid settings: {e}")

        st.markdown("---")
        st.markdown("**Dr. J. Doe**  \n<span style='font-size:0.8rem;color:#6B7280;'>Lab Director</span>",
                    unsafe_allow_html=True)
        st.caption("State is kept for this session only and resets on reload.")

    return lab["series_config"]


def render_global_header(subtitle="Samples • Levey–Jennings QC • SOP documents • AI assistant"):
    st.markdown(
        f"""
        <div class="qc-header">
          <div class="qc-badge">{subtitle}</div>
          <h1>PathoQC – Laboratory Dashboard</h1>
          <p>🧪 Theo dõi mẫu bệnh phẩm, nội kiểm Levey–Jennings và tài liệu SOP của phòng xét nghiệm.</p>
        </div>
        """,
        unsafe_allow_html=True,
    )


def render_stat_card(col, title, value, sub=""):
    with col:
        st.markdown(
            f"""
            <div class="qc-card">
              <div class="qc-card-title">{title}</div>
              <div class="qc-card-value">{value}</div>
              <div class="qc-card-sub">{sub or "&nbsp;"}</div>
            </div>
            """,
            unsafe_allow_html=True,
        )


def render_top_info_cards(series):
    c1, c2, c3 = st.columns(3)
    render_stat_card(c1, "🧫 Test", series.test_name or "—", f"Instrument: {series.instrument_id or '—'}")
    render_stat_card(c2, "🎯 Target", f"{series.mean:g} ± {series.sd:g}",
                     f"2SD: {2 * series.sd:g} • 3SD: {3 * series.sd:g}")
    worst = max((o.status for o in series), default=QCStatus.IN_CONTROL)
    render_stat_card(c3, "📐 Current status", status_pill(worst),
                     f"{series.count(QCStatus.WARNING)} warning • "
                     f"{series.count(QCStatus.OUT_OF_CONTROL)} out of control")


def status_pill(status) -> str:
    """HTML pill cho QCStatus hoặc SampleStatus."""
    if isinstance(status, QCStatus):
        label, color = STATUS_LABELS[status], STATUS_COLORS[status]
    else:
        label, color = status.value, SAMPLE_STATUS_COLORS.get(status, "#6B7280")
    return f"<span class='qc-pill' style='background:{color};'>{label}</span>"


# =====================================================
# BIỂU ĐỒ
# =====================================================


def create_levey_jennings_chart(df, title, y_span_sd=4.0, show_all_bands=True):
    """
    Biểu đồ Levey–Jennings (giá trị đo) từ QCSeries.to_frame().
    - đường Mean (xanh lá), ±1SD (xám), ±2SD (cam), ±3SD (đỏ)
    - điểm Warning cam, Out of Control đỏ (to hơn)
    """
    if df is None or df.empty:
        return None

    df = df.copy()
    mean = float(df["mean"].iloc[0])
    sd = float(df["sd"].iloc[0])
    df["Date"] = df["timestamp"].dt.strftime("%Y-%m-%d")
    df["size"] = np.where(df["status"] == int(QCStatus.OUT_OF_CONTROL), 140, 60)

    t = get_theme()
    y_scale = alt.Scale(domain=[mean - y_span_sd * sd, mean + y_span_sd * sd])

    base = alt.Chart(df).encode(
        x=alt.X("timestamp:T", title="Date", axis=alt.Axis(format="%b %d")),
        y=alt.Y("value:Q", title="Value", scale=y_scale),
    )

    line = base.mark_line(color=t["point"], strokeWidth=2)

    points = base.mark_point(filled=True).encode(
        color=alt.Color(
            "status_label:N",
            title="Status",
            scale=alt.Scale(
                domain=[STATUS_LABELS[s] for s in QCStatus],
                range=[STATUS_COLORS[s] for s in QCStatus],
            ),
        ),
        size=alt.Size("size:Q", legend=None),
        tooltip=[
            "Date",
            alt.Tooltip("value:Q", format=".2f"),
            alt.Tooltip("z_score:Q", format="+.2f", title="z-score"),
            alt.Tooltip("status_label:N", title="Status"),
            "instrument_id",
        ],
    )

    bands = [(0, "Mean", t["mean"])]
    if show_all_bands:
        bands += [(1, "+1SD", "#d1d5db"), (-1, "-1SD", "#d1d5db")]
    bands += [(2, "+2SD", t["warning"]), (-2, "-2SD", t["warning"])]
    if show_all_bands:
        bands += [(3, "+3SD", t["error"]), (-3, "-3SD", t["error"])]

    rules_data = pd.DataFrame(
        {
            "y": [mean + k * sd for k, _, _ in bands],
            "label": [label for _, label, _ in bands],
            "color": [color for _, _, color in bands],
        }
    )

    rules = alt.Chart(rules_data).mark_rule(strokeDash=[4, 4]).encode(
        y=alt.Y("y:Q", scale=y_scale),
        color=alt.Color("color:N", scale=None, legend=None),
    )

    text_labels = alt.Chart(rules_data).mark_text(align="left", dx=3, dy=-6).encode(
        y=alt.Y("y:Q", scale=y_scale),
        x=alt.value(0),
        text="label:N",
        color=alt.Color("color:N", scale=None, legend=None),
    )

    chart = (rules + text_labels + line + points).properties(
        title=title, height=400, background=t.get("chartBg", "#FFFFFF")
    )

    return (
        chart
        .configure_view(stroke=None)
        .configure_axis(
            grid=True,
            gridColor=t.get("grid", "#e5e7eb"),
            labelColor=t.get("text2", "#6B7280"),
            titleColor=t.get("text", "#1F2937"),
        )
        .configure_title(color=t.get("text", "#1F2937"), fontSize=14)
    )
