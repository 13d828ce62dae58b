"""
Координатные таблицы шаблонов сертификатов.

Все координаты заданы в логических пикселях холста 1024x723. Элемент с
anchor="center" центрируется по left, остальные привязаны левым краем.
"""

from .models import CertificateType

CANVAS_WIDTH = 1024
CANVAS_HEIGHT = 723
CENTER = CANVAS_WIDTH // 2

# CSS-стеки для HTML и имена TTF-файлов для растеризации
FONT_STACKS = {
    "poppins": "'Poppins', sans-serif",
    "dm-serif": "'DM Serif Display', serif",
    "open-sans": "'Open Sans', sans-serif",
    "serif": "Georgia, 'Times New Roman', serif",
    "mono": "'Courier New', monospace",
}

FONT_FILES = {
    "poppins": "Poppins-Regular.ttf",
    "dm-serif": "DMSerifDisplay-Regular.ttf",
    "open-sans": "OpenSans-Regular.ttf",
    "serif": "DejaVuSerif.ttf",
    "mono": "DejaVuSansMono.ttf",
}

# Общие элементы шаблонов с фоновым изображением
_BANNER_HEADER = [
    {"name": "issue_no", "field": "issue_no", "template": "CERTIFICATE NO: {issue_no}",
     "top": 130, "left": CENTER, "anchor": "center",
     "font_size": 14, "font_weight": "500", "color": "#1f5684", "font_family": "poppins"},
    {"name": "organization_name", "field": "organization_name",
     "top": 345, "left": CENTER, "anchor": "center", "width": 600,
     "font_size": 32, "color": "#7d1316", "font_family": "dm-serif"},
]

_BANNER_FOOTER = [
    {"name": "qr_code", "kind": "image", "field": "qr_code", "optional": True,
     "top": 460, "left": 90, "width": 94, "height": 94},
    {"name": "issue_date", "field": "issue_date",
     "top": 631, "left": 124,
     "font_size": 14, "font_weight": "bold", "color": "#1a365d", "font_family": "dm-serif"},
    {"name": "expiration_date", "field": "expiration_date",
     "top": 651, "left": 124,
     "font_size": 14, "font_weight": "bold", "color": "#1a365d", "font_family": "dm-serif"},
]

ACCREDITATION_LAYOUT = {
    "name": "accreditation",
    "background_image": "certification/orgaccreditation.png",
    "elements": _BANNER_HEADER + [
        {"name": "address", "field": "address",
         "top": 385, "left": CENTER, "anchor": "center", "width": 500,
         "font_size": 14, "font_weight": "400", "color": "#1e3a5f", "font_family": "open-sans"},
    ] + _BANNER_FOOTER,
}

ORGANIZATIONAL_MEMBERSHIP_LAYOUT = {
    "name": "organizational_membership",
    "background_image": "certification/membershipcer.png",
    "elements": _BANNER_HEADER + [
        {"name": "address", "field": "address",
         "top": 395, "left": CENTER, "anchor": "center", "width": 500,
         "font_size": 14, "font_weight": "400", "color": "#1e3a5f", "font_family": "open-sans"},
        {"name": "scope", "field": "scope",
         "top": 470, "left": CENTER, "anchor": "center", "width": 600,
         "font_size": 16, "color": "#1a365d", "font_family": "poppins"},
        {"name": "membership_statement_date", "field": "issue_date",
         "top": 431, "left": CENTER + 222, "anchor": "center", "width": 600,
         "font_size": 18, "font_weight": "bold", "color": "#1a365d", "font_family": "dm-serif"},
        {"name": "validity", "field": "validity",
         "top": 540, "left": CENTER + 30, "anchor": "center", "width": 600,
         "font_size": 16, "color": "#1a365d", "font_family": "poppins"},
    ] + _BANNER_FOOTER,
}

_LABEL = {"font_size": 14, "font_weight": "bold", "color": "#ffffff", "background": "#dc2626"}
_FIELD_LABEL = {"font_size": 14, "font_weight": "600", "color": "#1e293b", "background": "#fde047"}
_VALUE = {"font_size": 18, "color": "#ffffff", "background": "#2563eb"}

INDIVIDUAL_MEMBERSHIP_LAYOUT = {
    "name": "individual_membership",
    "background_image": None,
    "elements": [
        {"name": "title", "template": "Membership Certificate",
         "top": 40, "left": CENTER, "anchor": "center",
         "font_size": 36, "font_weight": "bold", "font_style": "italic", "color": "#0f172a"},
        {"name": "certificate_number_label", "template": "CERTIFICATE NO.",
         "top": 104, "left": 330, **_LABEL},
        {"name": "certificate_number", "field": "certificate_number",
         "top": 100, "left": 480, "font_family": "mono", **_VALUE},
        {"name": "association", "template": "AMERICAN ACCREDITATION ASSOCIATION",
         "top": 150, "left": CENTER, "anchor": "center",
         "font_size": 18, "font_weight": "bold", "color": "#1e293b"},
        {"name": "association_line", "template": "American Accreditation Association - AAA",
         "top": 196, "left": CENTER, "anchor": "center", "font_size": 20, "color": "#334155"},
        {"name": "certifies", "template": "Certifies that",
         "top": 230, "left": CENTER, "anchor": "center", "font_size": 20, "color": "#334155"},
        {"name": "organization_name_label", "template": "Organization name",
         "top": 282, "left": 200, **_FIELD_LABEL},
        {"name": "organization_name", "field": "organization_name",
         "top": 276, "left": 380, "width": 460, **_VALUE},
        {"name": "address_label", "template": "Address",
         "top": 324, "left": 200, **_FIELD_LABEL},
        {"name": "address", "field": "address",
         "top": 318, "left": 380, "width": 460, **_VALUE},
        {"name": "qualifications_label", "template": "Qualifications", "field": "qualifications",
         "optional": True, "top": 366, "left": 200, **_FIELD_LABEL},
        {"name": "qualifications", "field": "qualifications", "optional": True,
         "top": 360, "left": 380, "width": 460, **_VALUE},
        {"name": "membership_statement",
         "template": "Has gained the Individual Membership as Recognized Competency member on",
         "top": 418, "left": CENTER, "anchor": "center", "font_size": 18, "color": "#334155"},
        {"name": "membership_date", "field": "membership_date",
         "top": 450, "left": CENTER, "anchor": "center", **_VALUE},
        {"name": "validity_statement", "template": "That's valid for two years",
         "top": 490, "left": CENTER, "anchor": "center", "font_size": 18, "color": "#334155"},
        {"name": "issue_date_label", "template": "Issue Date:",
         "top": 602, "left": 60, **_LABEL},
        {"name": "issue_date", "field": "issue_date",
         "top": 600, "left": 170, **dict(_VALUE, font_size=16)},
        {"name": "expiration_date_label", "template": "Exp. Date:",
         "top": 638, "left": 60, **_LABEL},
        {"name": "expiration_date", "field": "expiration_date",
         "top": 636, "left": 170, **dict(_VALUE, font_size=16)},
        {"name": "signature_title", "template": "Executive Director",
         "top": 592, "left": 830, "anchor": "center",
         "font_size": 14, "font_weight": "600", "color": "#334155"},
        {"name": "signature", "template": "William Moore",
         "top": 618, "left": 830, "anchor": "center",
         "font_size": 18, "font_style": "italic", "color": "#475569"},
        {"name": "signature_name", "template": "William Moore",
         "top": 652, "left": 830, "anchor": "center", "font_size": 12, "color": "#64748b"},
    ],
}

TEMPLATE_LAYOUTS = {
    CertificateType.INDIVIDUAL_MEMBERSHIP: INDIVIDUAL_MEMBERSHIP_LAYOUT,
    CertificateType.ACCREDITATION: ACCREDITATION_LAYOUT,
    CertificateType.ORGANIZATIONAL_MEMBERSHIP: ORGANIZATIONAL_MEMBERSHIP_LAYOUT,
}
