from __future__ import annotations


class Tokenizer:
    """
    Rewindable cursor over the argument text of a message.

    Not safe to share between tasks; each dispatch builds its own.
    """

    def __init__(self, text: str, pos: int = 0) -> None:
        self.text = text
        self.pos = pos

    @property
    def exhausted(self) -> bool:
        return self.pos >= len(self.text)

    def read_char(self) -> str:
        if self.exhausted:
            raise IndexError("string is fully iterated")
        char = self.text[self.pos]
        self.pos += 1
        return char

    def rewind(self, n: int) -> None:
        self.pos = max(0, self.pos - n)

    def remainder(self, fill: bool = False) -> str:
        rest = self.text[self.pos :]
        if fill:
            self.pos = len(self.text)
        return rest

    def read_word(self) -> str:
        word: list[str] = []
        while not self.exhausted:
            char = self.read_char()
            if char == " ":
                break
            word.append(char)
        return "".join(word)

    def next_token(self) -> tuple[str, int]:
        """
        Read one argument and return it with the number of characters consumed.

        The count includes skipped spaces, quote delimiters and the space that
        ended the token, so `rewind(consumed)` restores the cursor exactly.
        """

        token: list[str] = []
        consumed = 0
        first = True
        quoted = False
        while not self.exhausted:
            char = self.read_char()
            consumed += 1
            if char == " ":
                if first:
                    continue
                if quoted:
                    token.append(char)
                    continue
                break
            if char == '"':
                if first:
                    quoted = True
                    first = False
                    continue
                if quoted:
                    break
            token.append(char)
            first = False
        return "".join(token), consumed
