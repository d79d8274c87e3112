import textwrap

def dedent_strip(text: str) -> str:
    """
    Remove the common indentation and trim leading/trailing whitespace.

    Handy for gantt and csv fixtures written as indented triple-quoted strings.
    The indentation of the lines relative to each other is kept, so a
    fixture can still contain indented task lines.

    Usage
    -----
    >>> dedent_strip(\"""
    ...     gantt
    ...         section Build
    ... \""")
    'gantt\\n    section Build'
    """
    return textwrap.dedent(text).strip()
