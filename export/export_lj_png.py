"""
Export biểu đồ Levey–Jennings (giá trị đo) thành PNG (bytes).
"""
from io import BytesIO

import matplotlib.pyplot as plt

from .word_reports import build_lj_figure


def export_lj_png(series, title=None) -> BytesIO:
    fig = build_lj_figure(series, title=title)
    buf = BytesIO()
    fig.savefig(buf, format="png", dpi=300, bbox_inches="tight", facecolor="white")
    plt.close(fig)
    buf.seek(0)
    return buf
