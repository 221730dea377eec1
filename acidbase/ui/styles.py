"""
Theme for the acid-base calculator window.

Light clinical palette, the Gamblegram segment fills and the Qt
stylesheet builders used by the input panel, results strip and chart.
"""

from acidbase.core.enums import IonKey

COLORS = {
    # Surfaces
    'background': '#F4F6FA',
    'background_alt': '#FFFFFF',
    'panel': '#EDF1F7',
    'card': '#FFFFFF',

    'border': '#D3DAE6',

    # Text
    'text': '#1F2933',
    'text_secondary': '#3E4C59',
    'text_dim': '#7B8794',

    # Controls
    'control': '#FFFFFF',
    'control_hover': '#E4EBF5',
    'control_pressed': '#D5DFEE',

    'primary': '#2F6FDE',
}

# Segment fills, keyed by ion. Pastels keep the dark labels readable;
# Unknown is saturated so unmeasured ions stand out.
GAMBLEGRAM_COLORS = {
    IonKey.NA: '#BFE7FF',
    IonKey.K: '#FFE9C9',
    IonKey.ICA: '#DFF7ED',
    IonKey.MG: '#E8E9FF',
    IonKey.CL: '#FFD8DA',
    IonKey.LACTATE: '#FFF6D6',
    IonKey.HCO3: '#E9FFEA',
    IonKey.ALBUMIN: '#F0EAFF',
    IonKey.PHOSPHATE: '#FFF9DE',
    IonKey.UNKNOWN: '#B347FF',
}

FONTS = {
    'family': 'Helvetica',
    'size_small': '11px',
    'size_normal': '13px',
    'size_medium': '14px',
    'size_title': '18px',
}


def get_base_widget_style():
    """Window-wide defaults (background, text, tooltips)."""
    return f"""
        QMainWindow, QWidget {{
            background: {COLORS['background']};
            color: {COLORS['text']};
            font-family: {FONTS['family']};
            font-size: {FONTS['size_normal']};
        }}
        QLabel {{ background: transparent; }}
        QToolTip {{
            background: {COLORS['card']};
            color: {COLORS['text']};
            border: 1px solid {COLORS['border']};
            padding: 4px 6px;
        }}
    """


def get_groupbox_style(title_color=None):
    """Card-like QGroupBox; the title sits on the top border."""
    title = title_color or COLORS['text_secondary']
    return f"""
        QGroupBox {{
            background: {COLORS['card']};
            border: 1px solid {COLORS['border']};
            border-radius: 6px;
            margin-top: 16px;
            padding: 12px 10px 10px 10px;
            font-size: {FONTS['size_medium']};
            font-weight: bold;
        }}
        QGroupBox::title {{
            subcontrol-origin: margin;
            left: 10px;
            padding: 0 4px;
            color: {title};
        }}
    """


def get_input_style():
    """Line edits, unit selectors and check boxes of the serum panel."""
    return f"""
        QLineEdit, QComboBox {{
            background: {COLORS['control']};
            border: 1px solid {COLORS['border']};
            border-radius: 4px;
            padding: 3px 6px;
            min-height: 22px;
        }}
        QLineEdit {{ min-width: 64px; }}
        QLineEdit:focus, QComboBox:focus {{ border: 1px solid {COLORS['primary']}; }}
        QLineEdit:disabled {{
            background: {COLORS['panel']};
            color: {COLORS['text_dim']};
        }}
        QComboBox QAbstractItemView {{
            background: {COLORS['card']};
            selection-background-color: {get_rgba(COLORS['primary'], 0.2)};
        }}
        QCheckBox {{ spacing: 6px; background: transparent; }}
    """


def get_button_style(variant="neutral", padding="6px 14px", radius=4):
    """Flat QPushButton; "primary" fills with the accent color."""
    if variant == "primary":
        bg, fg = COLORS['primary'], "white"
        hover, pressed = get_rgba(bg, 0.85), get_rgba(bg, 0.7)
    else:
        bg, fg = COLORS['control'], COLORS['text']
        hover, pressed = COLORS['control_hover'], COLORS['control_pressed']
    return f"""
        QPushButton {{
            background: {bg};
            color: {fg};
            border: 1px solid {COLORS['border']};
            border-radius: {radius}px;
            padding: {padding};
        }}
        QPushButton:hover {{ background: {hover}; }}
        QPushButton:pressed {{ background: {pressed}; }}
    """


def get_frame_style(bg_color=None, border_color=None, radius=6):
    bg = bg_color or COLORS['panel']
    border = border_color or COLORS['border']
    return f"QFrame {{ background: {bg}; border: 1px solid {border}; border-radius: {radius}px; }}"


def hex_to_rgb(hex_color):
    """'#RRGGBB' -> 'r, g, b' for use inside rgba()."""
    h = hex_color.lstrip('#')
    return ", ".join(str(int(h[i:i + 2], 16)) for i in (0, 2, 4))


def get_rgba(hex_color, alpha):
    return f"rgba({hex_to_rgb(hex_color)}, {alpha})"


STYLE_GROUPBOX = get_groupbox_style()
STYLE_INPUT = get_input_style()
