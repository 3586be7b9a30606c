from ..model import ContentType, TagPolicy

DEFINITION = TagPolicy(
    tag_name="loop",
    label="Loop",
    description="Repeats content based on dynamic data",
    content_model=ContentType.BLOCKS,
    force_self_closing=False,
)
