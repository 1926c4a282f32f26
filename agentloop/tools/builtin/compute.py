"""
Computational Tools

Small arithmetic capability, useful as a deterministic tool in examples and
tests.
"""

from ..decorators import tool


@tool(
    name="calculator",
    description="Perform basic arithmetic operations (add, subtract, multiply, divide)",
)
def calculator(operation: str, a: float, b: float) -> str:
    """
    Basic calculator for arithmetic operations.

    Args:
        operation: Operation type (add, subtract, multiply, divide)
        a: First number
        b: Second number

    Raises:
        ValueError: If operation is not supported or division by zero
    """
    operation = operation.lower().strip()

    if operation in ["add", "+"]:
        result = a + b
    elif operation in ["subtract", "-"]:
        result = a - b
    elif operation in ["multiply", "*"]:
        result = a * b
    elif operation in ["divide", "/"]:
        if b == 0:
            raise ValueError("Cannot divide by zero")
        result = a / b
    else:
        raise ValueError(
            f"Unsupported operation: {operation}. Supported: add, subtract, multiply, divide"
        )

    if float(result).is_integer():
        result = int(result)
    return f"{a:g} {operation} {b:g} = {result}"
