"""Custom styling for questionary prompts.

Every interactive selection in kubeseal-sync shares this style so the
two-stage secret picker reads as one flow.
"""

from questionary import Style

PROMPT_STYLE = Style(
    [
        ("qmark", "fg:#af87ff bold"),
        ("question", "bold"),
        ("answer", "fg:#ff87d7 bold"),
        ("pointer", "fg:#ff87d7 bold"),
        ("highlighted", "fg:#1c1c1c bg:#ff87d7 bold"),
        ("selected", "fg:#87d787"),
        # Namespace headers in the secret picker
        ("separator", "fg:#5fafff bold"),
        ("instruction", "fg:#6c6c6c italic"),
        ("text", ""),
        ("disabled", "fg:#585858 italic"),
    ]
)

POINTER = "❯ "
QMARK = "? "

# Prefix of the separator line naming a namespace group
GROUP_MARKER = "Namespace ==> "
