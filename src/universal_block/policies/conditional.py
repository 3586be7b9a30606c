from ..model import ContentType, TagPolicy

DEFINITION = TagPolicy(
    tag_name="if",
    label="If",
    description="Conditionally displays content",
    content_model=ContentType.BLOCKS,
    force_self_closing=False,
)
