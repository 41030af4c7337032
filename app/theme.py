"""Light and dark Fusion palettes."""

from PyQt6.QtGui import QColor, QPalette
from PyQt6.QtWidgets import QApplication

_Role = QPalette.ColorRole

_DARK = {
    _Role.Window:          (40,  40,  40),
    _Role.WindowText:      (220, 220, 220),
    _Role.Base:            (28,  28,  28),
    _Role.AlternateBase:   (48,  48,  48),
    _Role.ToolTipBase:     (28,  28,  28),
    _Role.ToolTipText:     (220, 220, 220),
    _Role.Text:            (220, 220, 220),
    _Role.Button:          (55,  55,  55),
    _Role.ButtonText:      (220, 220, 220),
    _Role.BrightText:      (255, 100, 100),
    _Role.Link:            (88,  166, 255),
    # Kept away from the rule palette so selections stay distinguishable
    _Role.Highlight:       (90,  90,  160),
    _Role.HighlightedText: (255, 255, 255),
    _Role.PlaceholderText: (120, 120, 120),
}


def apply_dark(app: QApplication) -> None:
    p = QPalette()
    for role, rgb in _DARK.items():
        p.setColor(role, QColor(*rgb))
    p.setColor(QPalette.ColorGroup.Disabled, _Role.Text,       QColor(100, 100, 100))
    p.setColor(QPalette.ColorGroup.Disabled, _Role.ButtonText, QColor(100, 100, 100))
    app.setPalette(p)


def apply_light(app: QApplication) -> None:
    app.setPalette(app.style().standardPalette())


def apply_theme(app: QApplication, dark: bool) -> None:
    if dark:
        apply_dark(app)
    else:
        apply_light(app)
