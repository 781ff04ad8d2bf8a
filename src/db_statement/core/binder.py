"""Bind a parameter set into the slots of a prepared statement."""

from collections.abc import Mapping
from typing import Any, Optional, Sequence

from db_statement.protocols import StatementHandle


def bind_parameters(
    statement: StatementHandle,
    parameters: Optional[Sequence[Any]],
    named_parameters: Optional[Sequence[str]] = None,
) -> int:
    """
    Bind values into a prepared statement.

    Without ``named_parameters`` the set is positional: element *i* goes to
    slot *i + 1*. With a name list, every mapping in the set is matched
    against it case-insensitively and each value is bound to every slot whose
    name matches its key. Unknown keys are ignored and slots nobody supplies
    stay unbound; the statement facility reports those when it executes.

    Values are handed to ``bind_value`` unchanged.

    Args:
        statement: Prepared statement
        parameters: Positional values or keyed records
        named_parameters: Placeholder names in template order

    Returns:
        Number of slot bindings performed
    """
    if not parameters:
        return 0

    if named_parameters is None:
        for index, value in enumerate(parameters):
            statement.bind_value(index + 1, value)
        return len(parameters)

    folded = [name.casefold() for name in named_parameters]
    bound = 0
    for record in parameters:
        if not isinstance(record, Mapping):
            continue
        for key, value in record.items():
            wanted = str(key).casefold()
            for index, name in enumerate(folded):
                if name == wanted:
                    statement.bind_value(index + 1, value)
                    bound += 1
    return bound
