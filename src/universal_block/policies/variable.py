from ..model import ContentType, TagPolicy

# <set var="..." /> binds a template variable; it never wraps content.
DEFINITION = TagPolicy(
    tag_name="set",
    label="Set",
    description="Sets variables using raw template expressions",
    content_model=ContentType.EMPTY,
    force_self_closing=True,
)
