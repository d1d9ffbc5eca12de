import shortuuid


def new_record_id() -> str:
    """22-character url-safe id used as primary key for every stored record."""
    return shortuuid.uuid()
