from docx.oxml import OxmlElement
from docx.oxml.ns import qn
from docx.enum.text import WD_ALIGN_PARAGRAPH
from docx.shared import Cm, Pt


def _add_page_field(paragraph, field_name: str):
    """Add a Word field (PAGE / NUMPAGES) to a paragraph."""
    run = paragraph.add_run()
    fld_begin = OxmlElement('w:fldChar')
    fld_begin.set(qn('w:fldCharType'), 'begin')
    instr = OxmlElement('w:instrText')
    instr.set(qn('xml:space'), 'preserve')
    instr.text = field_name
    fld_sep = OxmlElement('w:fldChar')
    fld_sep.set(qn('w:fldCharType'), 'separate')
    placeholder = OxmlElement('w:t')
    placeholder.text = "1"
    fld_end = OxmlElement('w:fldChar')
    fld_end.set(qn('w:fldCharType'), 'end')
    for el in (fld_begin, instr, fld_sep, placeholder, fld_end):
        run._r.append(el)
    run.font.size = Pt(8)


def setup_a4(doc, margin_cm: float = 2.0):
    sec = doc.sections[0]
    sec.page_height = Cm(29.7)
    sec.page_width = Cm(21.0)
    sec.top_margin = sec.bottom_margin = Cm(margin_cm)
    sec.left_margin = sec.right_margin = Cm(margin_cm)
    return sec


def apply_header_footer(doc, lab_name: str, form_title: str, footer_text: str):
    """
    Header: tên đơn vị + tên biểu mẫu; footer: phiên bản / ngày + 'Page X / Y'.
    """
    section = doc.sections[0]

    header = section.header
    header.is_linked_to_previous = False
    header.paragraphs[0].clear()
    p = header.paragraphs[0]
    p.alignment = WD_ALIGN_PARAGRAPH.CENTER
    r = p.add_run(form_title)
    r.bold = True
    r.font.size = Pt(10)

    if lab_name:
        p2 = header.add_paragraph()
        p2.alignment = WD_ALIGN_PARAGRAPH.CENTER
        p2.add_run(lab_name).font.size = Pt(9)

    footer = section.footer
    footer.is_linked_to_previous = False
    footer.paragraphs[0].clear()
    fp = footer.paragraphs[0]
    fp.alignment = WD_ALIGN_PARAGRAPH.CENTER
    run = fp.add_run(f"{footer_text}    |    Page ")
    run.font.size = Pt(8)
    _add_page_field(fp, "PAGE")
    fp.add_run(" / ").font.size = Pt(8)
    _add_page_field(fp, "NUMPAGES")
