from indexer_intent.resolver.context import AccumulatedContext


def synthesize(ctx: AccumulatedContext) -> str:
    """
    Builds the canonical query string, e.g. "index USDC transfers from latest blocks".

    Only the first element of each set is used. Missing parts are skipped, so a
    partial context still yields a (shorter) string.
    """
    parts = []

    action = ctx.actions.first()
    if action:
        parts.append(action)

    subject = ctx.subjects.first()
    if subject:
        parts.append(f"{subject} transfers")

    scope = ctx.scopes.first()
    if scope:
        parts.append(f"from {scope}")

    return " ".join(parts)


def describe(ctx: AccumulatedContext) -> str:
    """A friendly confirmation of what is about to be indexed."""
    action = ctx.actions.first() or "index"
    subject = ctx.subjects.first() or "token"
    scope = ctx.scopes.first() or "the specified blocks"
    return f"Perfect! I'll {action} {subject} transfers from {scope}. Creating the indexing job now..."
