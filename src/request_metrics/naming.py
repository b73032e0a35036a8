"""
Metric name normalization.

SDK measurement names are PascalCase enum names such as
``ClientExecuteTime``. Metric names and tag keys use the JavaBeans
decapitalized form so the same measurement gets the same name in every
ecosystem that reports it.
"""

DEFAULT_PREFIX = "aws.request."


def decapitalize(name: str) -> str:
    """
    Convert a name to normal property-name casing.

    The first character is lower-cased, except when the first two
    characters are both upper case, in which case the name is left alone.
    So ``ClientExecuteTime`` becomes ``clientExecuteTime`` while
    ``AWSErrorCode`` and ``URL`` are unchanged.

    Args:
        name: Name to decapitalize

    Returns:
        Decapitalized name
    """
    if not name:
        return name
    if len(name) > 1 and name[0].isupper() and name[1].isupper():
        return name
    return name[0].lower() + name[1:]


def id_name(name: str, prefix: str = DEFAULT_PREFIX) -> str:
    """
    Produce the name of a metric from the name of an SDK measurement.

    Names that already carry the prefix are returned unchanged.

    Args:
        name: Measurement name, usually a ``Field`` name
        prefix: Namespace prepended to the decapitalized name

    Returns:
        Name to use in the metric id
    """
    if prefix and name.startswith(prefix):
        return name
    return prefix + decapitalize(name)


__all__ = [
    "DEFAULT_PREFIX",
    "decapitalize",
    "id_name"
]
