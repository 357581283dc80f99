_UPPER = "ABCDEFGHIJKLMNOPQRSTUVWXYZ"


def camel_to_snake(name):
    """CustomerOrder -> customer_order. Already snake-cased names pass through unchanged."""
    out = []
    for i, ch in enumerate(name):
        if ch in _UPPER:
            if i > 0:
                out.append("_")
            out.append(ch.lower())
        else:
            out.append(ch)
    return "".join(out)
