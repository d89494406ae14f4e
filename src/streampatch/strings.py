"""Small string helpers used when rebuilding streams."""


def insert_into(target: str, text: str, at: int) -> str:
    """Insert text into target at the given position.

    Nothing from target is removed.

    Args:
        target: String to insert into
        text: String to insert
        at: Character position in target

    Returns:
        New string with text spliced in
    """
    return target[:at] + text + target[at:]


def hexdump(blob: str | bytes) -> str:
    r"""Render every byte as an escaped hex code.

    Text is encoded as UTF-8 first, so "Hello\r\n" becomes
    '\0x48\0x65\0x6c\0x6c\0x6f\0x0d\0x0a'.
    """
    if isinstance(blob, str):
        blob = blob.encode("utf-8")
    return "".join(f"\\0x{byte:02x}" for byte in blob)
