from .invoker import ClassificationOutcome

DRAW_AGAIN = "<br><button onclick=\"window.location.href='/'\">Draw Again</button>"


def render_result(outcome: ClassificationOutcome, draw_again: bool = False) -> str:
    """Wrap classifier output in a <pre> block, stderr after an Errors: marker."""
    text = outcome.stdout
    if outcome.stderr:
        text += "\nErrors:\n" + outcome.stderr
    html = f"<pre>{text}</pre>"
    if draw_again:
        html += DRAW_AGAIN
    return html
