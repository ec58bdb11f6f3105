import io
import logging
from dataclasses import dataclass, field
from datetime import date
from typing import Optional

import numpy as np

from docx import Document
from docx.shared import Cm, Pt
from docx.enum.text import WD_ALIGN_PARAGRAPH
from docx.enum.table import WD_TABLE_ALIGNMENT

import matplotlib.pyplot as plt

from export.docx_layout import apply_header_footer, setup_a4
from utils.statistics import STATUS_LABELS, QCStatus, mean_sd_cv

logger = logging.getLogger(__name__)

STATUS_COLORS = {
    QCStatus.IN_CONTROL: "#3b82f6",
    QCStatus.WARNING: "#f59e0b",
    QCStatus.OUT_OF_CONTROL: "#ef4444",
}


APP_VERSION = "0.1.0"


@dataclass
class ReportMeta:
    lab_name: str = "PathoQC Laboratory"
    version_text: str = f"PathoQC {APP_VERSION}"
    effective_date: str = field(default_factory=lambda: date.today().isoformat())

    @property
    def footer_text(self) -> str:
        parts = [self.version_text]
        if self.effective_date:
            parts.append(f"Exported {self.effective_date}")
        return "    |    ".join(p for p in parts if p)


def build_lj_figure(series, title: Optional[str] = None) -> plt.Figure:
    """
    Levey–Jennings theo giá trị đo:
    - đường Mean, ±1SD, ±2SD (cam), ±3SD (đỏ)
    - điểm Warning tô cam, Out of Control khoanh đỏ
    - trục y: Mean ± 4SD
    """
    if series is None or len(series) == 0:
        raise ValueError("series is empty")

    mean, sd = series.mean, series.sd
    dates = [o.timestamp for o in series]
    values = np.array(series.values(), dtype=float)
    x = np.arange(len(dates))

    fig = plt.figure(figsize=(8.2, 4.6), dpi=200)
    ax = fig.add_subplot(111)
    ax.plot(x, values, color=STATUS_COLORS[QCStatus.IN_CONTROL], linewidth=1.6, zorder=3)

    for i, o in enumerate(series):
        ax.scatter([x[i]], [o.value], s=30 if o.status == QCStatus.IN_CONTROL else 46,
                   color=STATUS_COLORS[o.status], zorder=4)
        if o.status == QCStatus.OUT_OF_CONTROL:
            ax.scatter([x[i]], [o.value], s=140, facecolors="none",
                       edgecolors="red", linewidths=2.0, zorder=5)

    for k, color, ls in [(0, "#10b981", "--"),
                         (1, "#d1d5db", "--"), (-1, "#d1d5db", "--"),
                         (2, "#f59e0b", "-"), (-2, "#f59e0b", "-"),
                         (3, "#ef4444", "-"), (-3, "#ef4444", "-")]:
        ax.axhline(mean + k * sd, color=color, linewidth=1.0, linestyle=ls, alpha=0.9)
        if k:
            ax.text(len(x) - 0.5, mean + k * sd, f"{k:+d}SD", fontsize=7, color=color, va="bottom")

    ax.set_title(title or f"Levey–Jennings – {series.test_name} ({series.instrument_id})", fontsize=11)
    ax.set_ylabel("Value")
    ax.set_xlabel("Date")
    labels = [d.strftime("%b %d") for d in dates]
    if len(x) > 15:
        step = max(1, len(x) // 10)
        show = np.arange(0, len(x), step)
        ax.set_xticks(show)
        ax.set_xticklabels([labels[i] for i in show], fontsize=8)
    else:
        ax.set_xticks(x)
        ax.set_xticklabels(labels, fontsize=8)

    ax.set_ylim(mean - 4 * sd, mean + 4 * sd)
    ax.grid(True, alpha=0.25)
    fig.tight_layout()
    return fig


def _fig_to_png(fig, dpi=300) -> io.BytesIO:
    buf = io.BytesIO()
    fig.savefig(buf, format="png", dpi=dpi, bbox_inches="tight", facecolor="white")
    plt.close(fig)
    buf.seek(0)
    return buf


def _add_title(doc, text):
    title = doc.add_paragraph(text)
    title.runs[0].bold = True
    title.runs[0].font.size = Pt(14)
    title.alignment = WD_ALIGN_PARAGRAPH.CENTER


def build_sop_docx(sop, meta: Optional[ReportMeta] = None) -> io.BytesIO:
    """Xuất SOP ra Word A4 (header/footer theo biểu mẫu)."""
    meta = meta or ReportMeta()
    doc = Document()
    setup_a4(doc)
    apply_header_footer(
        doc,
        lab_name=meta.lab_name,
        form_title="STANDARD OPERATING PROCEDURE",
        footer_text=f"{sop.id}    |    Version {sop.version}",
    )

    _add_title(doc, sop.title.upper())
    doc.add_paragraph("")

    info = doc.add_table(rows=4, cols=2)
    info.style = "Table Grid"
    info.alignment = WD_TABLE_ALIGNMENT.CENTER
    info.cell(0, 0).text = "Document ID"; info.cell(0, 1).text = sop.id
    info.cell(1, 0).text = "Version"; info.cell(1, 1).text = sop.version
    info.cell(2, 0).text = "Last updated"; info.cell(2, 1).text = sop.last_updated.isoformat()
    info.cell(3, 0).text = "Status"; info.cell(3, 1).text = sop.status

    doc.add_paragraph("")
    for line in sop.content.splitlines():
        p = doc.add_paragraph(line)
        # tiêu đề mục dạng "1. PURPOSE"
        head = line.strip().split(" ", 1)
        if len(head) == 2 and head[0].rstrip(".").isdigit() and head[1].isupper():
            for r in p.runs:
                r.bold = True

    buf = io.BytesIO()
    doc.save(buf)
    buf.seek(0)
    logger.info("Exported SOP %s to Word", sop.id)
    return buf


def build_qc_report_docx(series, meta: Optional[ReportMeta] = None, analysis: Optional[str] = None) -> io.BytesIO:
    """Báo cáo QC: bảng điểm, thống kê, biểu đồ L–J và (tuỳ chọn) nhận định AI."""
    if series is None or len(series) == 0:
        raise ValueError("series is empty")
    meta = meta or ReportMeta()

    doc = Document()
    setup_a4(doc)
    apply_header_footer(
        doc,
        lab_name=meta.lab_name,
        form_title="QUALITY CONTROL SUMMARY",
        footer_text=meta.footer_text,
    )

    _add_title(doc, f"QC SUMMARY – {series.test_name.upper()}")
    doc.add_paragraph("")

    obs_mean, obs_sd, obs_cv = mean_sd_cv(series.values())
    first, last = series[0].timestamp, series[-1].timestamp
    info = doc.add_table(rows=5, cols=2)
    info.style = "Table Grid"
    info.alignment = WD_TABLE_ALIGNMENT.CENTER
    info.cell(0, 0).text = "Instrument"; info.cell(0, 1).text = series.instrument_id
    info.cell(1, 0).text = "Period"; info.cell(1, 1).text = f"{first.isoformat()} – {last.isoformat()}"
    info.cell(2, 0).text = "Target mean / SD"; info.cell(2, 1).text = f"{series.mean:g} / {series.sd:g}"
    info.cell(3, 0).text = "Observed mean / SD / CV%"
    info.cell(3, 1).text = f"{obs_mean:.2f} / {obs_sd:.2f} / {obs_cv:.2f}"
    info.cell(4, 0).text = "Warning / Out of control"
    info.cell(4, 1).text = (
        f"{series.count(QCStatus.WARNING)} / {series.count(QCStatus.OUT_OF_CONTROL)}"
    )

    doc.add_paragraph("")
    doc.add_picture(_fig_to_png(build_lj_figure(series), dpi=200), width=Cm(16.5))

    doc.add_paragraph("")
    p = doc.add_paragraph("DAILY RESULTS")
    p.runs[0].bold = True

    tbl = doc.add_table(rows=1, cols=4)
    tbl.style = "Table Grid"
    tbl.alignment = WD_TABLE_ALIGNMENT.CENTER
    for i, h in enumerate(["Date", "Value", "Z-score", "Status"]):
        tbl.cell(0, i).text = h
    for o in series:
        cells = tbl.add_row().cells
        cells[0].text = o.timestamp.isoformat()
        cells[1].text = f"{o.value:.2f}"
        cells[2].text = f"{(o.value - o.mean) / o.sd:+.2f}"
        cells[3].text = STATUS_LABELS[o.status]

    if analysis:
        doc.add_paragraph("")
        p = doc.add_paragraph("AI TREND ANALYSIS")
        p.runs[0].bold = True
        for line in analysis.splitlines():
            doc.add_paragraph(line)

    buf = io.BytesIO()
    doc.save(buf)
    buf.seek(0)
    return buf
