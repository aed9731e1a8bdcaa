from decimal import Decimal, InvalidOperation

DIGITS = frozenset("0123456789")
OPERATORS = ("+", "-", "×", "÷")


def _calculate(first: Decimal, second: Decimal, operator: str) -> Decimal:
    if operator == "+":
        return first + second
    if operator == "-":
        return first - second
    if operator == "×":
        return first * second
    if operator == "÷":
        return first / second if second != 0 else Decimal("0")
    return second


def _value(display: str) -> Decimal:
    try:
        return Decimal(display)
    except InvalidOperation:
        return Decimal("0")


class Keypad:
    def __init__(self) -> None:
        self.clear()

    def clear(self) -> None:
        self.display = "0"
        self._previous: Decimal | None = None
        self._operator: str | None = None
        self._waiting_for_operand = False

    def digit(self, key: str) -> None:
        if key not in DIGITS:
            raise ValueError(f"Not a digit: {key!r}")
        if self._waiting_for_operand:
            self.display = key
            self._waiting_for_operand = False
        else:
            self.display = key if self.display == "0" else self.display + key

    def decimal_point(self) -> None:
        if self._waiting_for_operand:
            self.display = "0."
            self._waiting_for_operand = False
        elif "." not in self.display:
            self.display += "."

    def backspace(self) -> None:
        self.display = self.display[:-1] if len(self.display) > 1 else "0"

    def operator(self, key: str) -> None:
        if key not in OPERATORS:
            raise ValueError(f"Unknown operator: {key!r}")
        current = _value(self.display)
        if self._previous is None:
            self._previous = current
        elif self._operator and not self._waiting_for_operand:
            self._previous = _calculate(self._previous, current, self._operator)
            self.display = _format(self._previous)
        self._operator = key
        self._waiting_for_operand = True

    def equals(self) -> None:
        if self._previous is None or self._operator is None:
            return
        result = _calculate(self._previous, _value(self.display), self._operator)
        self.display = _format(result)
        self._previous = None
        self._operator = None
        self._waiting_for_operand = True

    def press(self, key: str) -> None:
        if key in DIGITS:
            self.digit(key)
        elif key == ".":
            self.decimal_point()
        elif key in OPERATORS:
            self.operator(key)
        elif key == "=":
            self.equals()
        else:
            raise ValueError(f"Unknown key: {key!r}")


def _format(value: Decimal) -> str:
    text = format(value.normalize(), "f")
    return text if text != "-0" else "0"
