title_bar = {}
desktop = {}
menu = {}
badges = {}

_defaults = {}


def init(style: str = "compatible"):
    """
    Initializes the glyphs used in the UI.

    :param style: Name of the style set. Options:
                  - 'compatible' (default, plain ASCII)
                  - 'standard'
                  - 'nerdfont'
    """
    global title_bar, desktop, menu, badges, _defaults

    if style == "compatible":
        title_bar = {
            "maximize": "[]",
            "restore": "][",
            "exit": "X",
            "resize": "%",
        }
        desktop = {
            "journal_folder": "\\[F]",
            "new_entry": "\\[+]",
            "calendar": "\\[C]",
            "streaks": "\\[S]",
            "settings": "\\[#]",
        }
        menu = {
            "apple": "@",
            "clock": "T",
            "user": "U",
            "check": "x",
            "uncheck": " ",
        }
        badges = {
            "earned": "*",
            "locked": "-",
            "streak": "!",
            "record": "^",
        }

    elif style == "standard":
        title_bar = {
            "maximize": "□",
            "restore": "❐",
            "exit": "✕",
            "resize": "◢",
        }
        desktop = {
            "journal_folder": "📁",
            "new_entry": "📝",
            "calendar": "📅",
            "streaks": "🔥",
            "settings": "⚙",
        }
        menu = {
            "apple": "◆",
            "clock": "🕒",
            "user": "👤",
            "check": "✓",
            "uncheck": " ",
        }
        badges = {
            "earned": "🏆",
            "locked": "🔒",
            "streak": "⚡",
            "record": "🏅",
        }

    elif style == "nerdfont":
        title_bar = {
            "maximize": "󰖯",
            "restore": "󰖲",
            "exit": "󰖭",
            "resize": "󰩨",
        }
        desktop = {
            "journal_folder": " 󰉋 ",
            "new_entry": " 󱞁 ",
            "calendar": " 󰃭 ",
            "streaks": " 󰈸 ",
            "settings": " 󰒓 ",
        }
        menu = {
            "apple": "◆",
            "clock": "󰥔",
            "user": "󰀄",
            "check": "󰄬",
            "uncheck": " ",
        }
        badges = {
            "earned": "󰆥",
            "locked": "󰌾",
            "streak": "󱐋",
            "record": "󰔸",
        }

    else:
        raise ValueError(f"Unknown style: {style}")

    _defaults = {
        "title_bar": title_bar,
        "desktop": desktop,
        "menu": menu,
        "badges": badges,
    }


init()
