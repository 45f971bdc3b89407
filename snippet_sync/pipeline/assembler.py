"""
Rendering of the fenced documentation block.

The layout is fixed so other tools reading the same markers stay compatible.
"""

from snippet_sync.pipeline.markers import end_token, start_token
from snippet_sync.state import Fragment

FENCE = "```"
PROVENANCE_LINE = "// Extracted from source code"


def render_block(fragment: Fragment) -> str:
    return "\n".join([
        f"{FENCE}{fragment.type_tag}",
        PROVENANCE_LINE,
        start_token(fragment.identifier),
        fragment.text,
        end_token(fragment.identifier),
        FENCE,
    ])
