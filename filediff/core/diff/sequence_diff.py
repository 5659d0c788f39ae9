"""
Sequence differ.

Computes a minimal, human-readable edit script between two texts:
- Common prefix/suffix trimming and containment shortcuts
- Myers' O(ND) middle-snake bisection
- Optional line-level pre-pass for large inputs
- Semantic cleanup (equality elimination, boundary alignment, overlaps)

The result is deterministic for a given pair of inputs and options as
long as the diff finishes before its deadline (1 second by default).
"""

from __future__ import annotations

import logging
import re
import time
from dataclasses import dataclass
from typing import Optional

from filediff.core.models import DiffOp, DiffOperation

DELETE = DiffOperation.DELETE
INSERT = DiffOperation.INSERT
EQUAL = DiffOperation.EQUAL

# Internal representation: mutable list of (operation, text) tuples.
_Diffs = list[tuple[DiffOperation, str]]

_BLANK_LINE_END = re.compile(r"\n\r?\n$")
_BLANK_LINE_START = re.compile(r"^\r?\n\r?\n")

# Highest code point usable as a line token.
_MAX_LINE_TOKENS = 1114111


class DiffTimeout(Exception):
    """Raised internally when the configured deadline passes."""


@dataclass
class DiffOptions:
    """Options for the sequence differ."""
    max_input_size: int = 2_000_000     # Combined length ceiling (characters)
    timeout: float = 1.0                # Seconds, 0 disables the deadline
    line_mode_threshold: int = 10_000   # Both texts longer -> line pre-pass
    semantic_cleanup: bool = True


# =============================================================================
# Text helpers
# =============================================================================

def common_prefix(text1: str, text2: str) -> int:
    """Length of the common prefix of two strings."""
    if not text1 or not text2 or text1[0] != text2[0]:
        return 0
    pointer_min = 0
    pointer_max = min(len(text1), len(text2))
    pointer_mid = pointer_max
    pointer_start = 0
    while pointer_min < pointer_mid:
        if text1[pointer_start:pointer_mid] == text2[pointer_start:pointer_mid]:
            pointer_min = pointer_mid
            pointer_start = pointer_min
        else:
            pointer_max = pointer_mid
        pointer_mid = (pointer_max - pointer_min) // 2 + pointer_min
    return pointer_mid


def common_suffix(text1: str, text2: str) -> int:
    """Length of the common suffix of two strings."""
    if not text1 or not text2 or text1[-1] != text2[-1]:
        return 0
    pointer_min = 0
    pointer_max = min(len(text1), len(text2))
    pointer_mid = pointer_max
    pointer_end = 0
    while pointer_min < pointer_mid:
        if (text1[-pointer_mid:len(text1) - pointer_end] ==
                text2[-pointer_mid:len(text2) - pointer_end]):
            pointer_min = pointer_mid
            pointer_end = pointer_min
        else:
            pointer_max = pointer_mid
        pointer_mid = (pointer_max - pointer_min) // 2 + pointer_min
    return pointer_mid


def common_overlap(text1: str, text2: str) -> int:
    """Length of the longest suffix of ``text1`` that is a prefix of ``text2``."""
    length1 = len(text1)
    length2 = len(text2)
    if length1 == 0 or length2 == 0:
        return 0
    if length1 > length2:
        text1 = text1[-length2:]
    elif length1 < length2:
        text2 = text2[:length1]
    text_length = min(length1, length2)
    if text1 == text2:
        return text_length

    best = 0
    length = 1
    while True:
        pattern = text1[-length:]
        found = text2.find(pattern)
        if found == -1:
            return best
        length += found
        if found == 0 or text1[-length:] == text2[:length]:
            best = length
            length += 1


def _semantic_score(one: str, two: str) -> int:
    """
    Score how well the boundary between two strings falls on a natural break.

    Returns:
        6 for an edge of the text, 5 for a blank line, 4 for a line break,
        3 for the end of a sentence, 2 for whitespace, 1 for other
        non-alphanumerics and 0 otherwise.
    """
    if not one or not two:
        return 6

    char1 = one[-1]
    char2 = two[0]
    non_alnum1 = not char1.isalnum()
    non_alnum2 = not char2.isalnum()
    whitespace1 = non_alnum1 and char1.isspace()
    whitespace2 = non_alnum2 and char2.isspace()
    line_break1 = whitespace1 and char1 in '\r\n'
    line_break2 = whitespace2 and char2 in '\r\n'
    blank_line1 = line_break1 and _BLANK_LINE_END.search(one) is not None
    blank_line2 = line_break2 and _BLANK_LINE_START.match(two) is not None

    if blank_line1 or blank_line2:
        return 5
    if line_break1 or line_break2:
        return 4
    if non_alnum1 and not whitespace1 and whitespace2:
        return 3
    if whitespace1 or whitespace2:
        return 2
    if non_alnum1 or non_alnum2:
        return 1
    return 0


def _coalesce(diffs: _Diffs) -> None:
    """Drop empty operations and join neighbours of the same kind, in place."""
    result: _Diffs = []
    for op, text in diffs:
        if not text:
            continue
        if result and result[-1][0] is op:
            result[-1] = (op, result[-1][1] + text)
        else:
            result.append((op, text))
    diffs[:] = result


# =============================================================================
# Differ
# =============================================================================

class SequenceDiffer:
    """
    Edit script engine.

    Produces the shortest edit script between two texts and, by default,
    cleans it up so that edits fall on word and line boundaries.
    """

    def __init__(self, options: Optional[DiffOptions] = None):
        self.options = options or DiffOptions()

    def diff(self, text_a: str, text_b: str) -> list[DiffOp]:
        """
        Compute the edit script transforming ``text_a`` into ``text_b``.

        Args:
            text_a: Left/original text
            text_b: Right/modified text

        Returns:
            List of DiffOp. Equal inputs yield a single EQUAL operation
            (or nothing for two empty texts). Inputs above the size ceiling,
            or running past the deadline, yield a whole-text replacement.
        """
        if text_a == text_b:
            return [DiffOp(EQUAL, text_a)] if text_a else []

        total = len(text_a) + len(text_b)
        if total > self.options.max_input_size:
            logging.warning(
                f"SequenceDiffer - Input too large ({total} > "
                f"{self.options.max_input_size} chars), using coarse diff"
            )
            return self._replace_all(text_a, text_b)

        deadline = None
        if self.options.timeout > 0:
            deadline = time.monotonic() + self.options.timeout

        try:
            line_mode = (
                len(text_a) > self.options.line_mode_threshold and
                len(text_b) > self.options.line_mode_threshold
            )
            diffs = self._main(text_a, text_b, deadline, line_mode)
            if self.options.semantic_cleanup:
                self.cleanup_semantic(diffs)
        except DiffTimeout:
            logging.warning(
                f"SequenceDiffer - Diff exceeded {self.options.timeout}s, "
                f"using coarse diff"
            )
            return self._replace_all(text_a, text_b)

        _coalesce(diffs)
        return [DiffOp(op, text) for op, text in diffs]

    @staticmethod
    def _replace_all(text_a: str, text_b: str) -> list[DiffOp]:
        ops = []
        if text_a:
            ops.append(DiffOp(DELETE, text_a))
        if text_b:
            ops.append(DiffOp(INSERT, text_b))
        return ops

    # -------------------------------------------------------------------------
    # Core algorithm
    # -------------------------------------------------------------------------

    def _main(
        self,
        text1: str,
        text2: str,
        deadline: Optional[float],
        line_mode: bool = False
    ) -> _Diffs:
        if text1 == text2:
            return [(EQUAL, text1)] if text1 else []

        length = common_prefix(text1, text2)
        prefix = text1[:length]
        text1 = text1[length:]
        text2 = text2[length:]

        length = common_suffix(text1, text2)
        if length:
            suffix = text1[-length:]
            text1 = text1[:-length]
            text2 = text2[:-length]
        else:
            suffix = ''

        diffs = self._compute(text1, text2, deadline, line_mode)

        if prefix:
            diffs.insert(0, (EQUAL, prefix))
        if suffix:
            diffs.append((EQUAL, suffix))
        self.cleanup_merge(diffs)
        return diffs

    def _compute(
        self,
        text1: str,
        text2: str,
        deadline: Optional[float],
        line_mode: bool
    ) -> _Diffs:
        """Diff two texts that share no common prefix or suffix."""
        if not text1:
            return [(INSERT, text2)]
        if not text2:
            return [(DELETE, text1)]

        if len(text1) > len(text2):
            long_text, short_text = text1, text2
        else:
            long_text, short_text = text2, text1

        i = long_text.find(short_text)
        if i != -1:
            # Shorter text is inside the longer text
            op = DELETE if len(text1) > len(text2) else INSERT
            return [
                (op, long_text[:i]),
                (EQUAL, short_text),
                (op, long_text[i + len(short_text):]),
            ]

        if len(short_text) == 1:
            # Single character that is not in the other text
            return [(DELETE, text1), (INSERT, text2)]

        if line_mode:
            return self._line_mode(text1, text2, deadline)

        return self._bisect(text1, text2, deadline)

    def _bisect(self, text1: str, text2: str, deadline: Optional[float]) -> _Diffs:
        """
        Find the middle snake of the edit graph and split the problem there.

        Forward and reverse Myers searches run in lockstep until their
        paths overlap.
        """
        text1_length = len(text1)
        text2_length = len(text2)
        max_d = (text1_length + text2_length + 1) // 2
        v_offset = max_d
        v_length = 2 * max_d
        v1 = [-1] * v_length
        v1[v_offset + 1] = 0
        v2 = v1[:]
        delta = text1_length - text2_length
        # Odd delta: the front path will collide with the reverse path
        front = (delta % 2 != 0)
        k1start = k1end = 0
        k2start = k2end = 0

        for d in range(max_d):
            if deadline is not None and time.monotonic() > deadline:
                raise DiffTimeout()

            # Walk the front path one step
            for k1 in range(-d + k1start, d + 1 - k1end, 2):
                k1_offset = v_offset + k1
                if k1 == -d or (k1 != d and v1[k1_offset - 1] < v1[k1_offset + 1]):
                    x1 = v1[k1_offset + 1]
                else:
                    x1 = v1[k1_offset - 1] + 1
                y1 = x1 - k1
                while (x1 < text1_length and y1 < text2_length and
                       text1[x1] == text2[y1]):
                    x1 += 1
                    y1 += 1
                v1[k1_offset] = x1
                if x1 > text1_length:
                    # Ran off the right of the graph
                    k1end += 2
                elif y1 > text2_length:
                    # Ran off the bottom of the graph
                    k1start += 2
                elif front:
                    k2_offset = v_offset + delta - k1
                    if 0 <= k2_offset < v_length and v2[k2_offset] != -1:
                        x2 = text1_length - v2[k2_offset]
                        if x1 >= x2:
                            return self._bisect_split(text1, text2, x1, y1, deadline)

            # Walk the reverse path one step
            for k2 in range(-d + k2start, d + 1 - k2end, 2):
                k2_offset = v_offset + k2
                if k2 == -d or (k2 != d and v2[k2_offset - 1] < v2[k2_offset + 1]):
                    x2 = v2[k2_offset + 1]
                else:
                    x2 = v2[k2_offset - 1] + 1
                y2 = x2 - k2
                while (x2 < text1_length and y2 < text2_length and
                       text1[-x2 - 1] == text2[-y2 - 1]):
                    x2 += 1
                    y2 += 1
                v2[k2_offset] = x2
                if x2 > text1_length:
                    k2end += 2
                elif y2 > text2_length:
                    k2start += 2
                elif not front:
                    k1_offset = v_offset + delta - k2
                    if 0 <= k1_offset < v_length and v1[k1_offset] != -1:
                        x1 = v1[k1_offset]
                        y1 = v_offset + x1 - k1_offset
                        # Mirror x2 onto the top-left coordinate system
                        x2 = text1_length - x2
                        if x1 >= x2:
                            return self._bisect_split(text1, text2, x1, y1, deadline)

        # No commonality at all
        return [(DELETE, text1), (INSERT, text2)]

    def _bisect_split(
        self,
        text1: str,
        text2: str,
        x: int,
        y: int,
        deadline: Optional[float]
    ) -> _Diffs:
        diffs = self._main(text1[:x], text2[:y], deadline)
        diffs += self._main(text1[x:], text2[y:], deadline)
        return diffs

    # -------------------------------------------------------------------------
    # Line mode
    # -------------------------------------------------------------------------

    @staticmethod
    def _lines_to_chars(text1: str, text2: str) -> tuple[str, str, list[str]]:
        """
        Encode each distinct line as a single character.

        Returns:
            (encoded text1, encoded text2, line table). Entry 0 of the table
            is unused so that no line encodes to NUL.
        """
        line_array = ['']
        line_hash: dict[str, int] = {}

        def encode(text: str) -> str:
            chars = []
            start = 0
            while start < len(text):
                end = text.find('\n', start)
                if end == -1:
                    end = len(text) - 1
                if len(line_array) == _MAX_LINE_TOKENS:
                    # Out of tokens: the rest of the text becomes one line
                    end = len(text) - 1
                line = text[start:end + 1]
                token = line_hash.get(line)
                if token is None:
                    line_array.append(line)
                    token = len(line_array) - 1
                    line_hash[line] = token
                chars.append(chr(token))
                start = end + 1
            return ''.join(chars)

        chars1 = encode(text1)
        chars2 = encode(text2)
        return chars1, chars2, line_array

    def _line_mode(self, text1: str, text2: str, deadline: Optional[float]) -> _Diffs:
        """Diff line-by-line first, then re-diff the replaced regions."""
        chars1, chars2, line_array = self._lines_to_chars(text1, text2)
        diffs = self._main(chars1, chars2, deadline)
        diffs[:] = [
            (op, ''.join(line_array[ord(c)] for c in text))
            for op, text in diffs
        ]
        self.cleanup_semantic(diffs)

        # Re-diff each delete/insert run character by character
        diffs.append((EQUAL, ''))
        pointer = 0
        count_delete = count_insert = 0
        text_delete = text_insert = ''
        while pointer < len(diffs):
            op, text = diffs[pointer]
            if op is INSERT:
                count_insert += 1
                text_insert += text
            elif op is DELETE:
                count_delete += 1
                text_delete += text
            else:
                if count_delete >= 1 and count_insert >= 1:
                    start = pointer - count_delete - count_insert
                    sub_diffs = self._main(text_delete, text_insert, deadline)
                    diffs[start:pointer] = sub_diffs
                    pointer = start + len(sub_diffs)
                count_delete = count_insert = 0
                text_delete = text_insert = ''
            pointer += 1
        diffs.pop()
        _coalesce(diffs)
        return diffs

    # -------------------------------------------------------------------------
    # Cleanup passes
    # -------------------------------------------------------------------------

    def cleanup_merge(self, diffs: _Diffs) -> None:
        """
        Normalize an edit script in place.

        Merges runs of edits into at most one deletion and one insertion,
        factors common prefixes and suffixes out of them, and slides single
        edits sideways when that removes an equality.
        """
        _coalesce(diffs)
        diffs.append((EQUAL, ''))
        pointer = 0
        count_delete = count_insert = 0
        text_delete = text_insert = ''
        while pointer < len(diffs):
            op, text = diffs[pointer]
            if op is INSERT:
                count_insert += 1
                text_insert += text
                pointer += 1
            elif op is DELETE:
                count_delete += 1
                text_delete += text
                pointer += 1
            else:
                if count_delete + count_insert > 1:
                    if count_delete and count_insert:
                        length = common_prefix(text_insert, text_delete)
                        if length:
                            x = pointer - count_delete - count_insert - 1
                            if x >= 0 and diffs[x][0] is EQUAL:
                                diffs[x] = (EQUAL, diffs[x][1] + text_insert[:length])
                            else:
                                diffs.insert(0, (EQUAL, text_insert[:length]))
                                pointer += 1
                            text_insert = text_insert[length:]
                            text_delete = text_delete[length:]
                        length = common_suffix(text_insert, text_delete)
                        if length:
                            diffs[pointer] = (
                                EQUAL, text_insert[-length:] + diffs[pointer][1]
                            )
                            text_insert = text_insert[:-length]
                            text_delete = text_delete[:-length]
                    new_ops: _Diffs = []
                    if text_delete:
                        new_ops.append((DELETE, text_delete))
                    if text_insert:
                        new_ops.append((INSERT, text_insert))
                    pointer -= count_delete + count_insert
                    diffs[pointer:pointer + count_delete + count_insert] = new_ops
                    pointer += len(new_ops) + 1
                elif pointer != 0 and diffs[pointer - 1][0] is EQUAL:
                    diffs[pointer - 1] = (EQUAL, diffs[pointer - 1][1] + text)
                    del diffs[pointer]
                else:
                    pointer += 1
                count_delete = count_insert = 0
                text_delete = text_insert = ''
        _coalesce(diffs)

        # Slide single edits surrounded by equalities, e.g. A<ins>BA</ins>C
        # becomes <ins>AB</ins>AC
        changes = False
        pointer = 1
        while pointer < len(diffs) - 1:
            prev_op, prev_text = diffs[pointer - 1]
            op, text = diffs[pointer]
            next_op, next_text = diffs[pointer + 1]
            if prev_op is EQUAL and next_op is EQUAL:
                if text.endswith(prev_text):
                    diffs[pointer] = (op, prev_text + text[:-len(prev_text)])
                    diffs[pointer + 1] = (EQUAL, prev_text + next_text)
                    del diffs[pointer - 1]
                    changes = True
                elif text.startswith(next_text):
                    diffs[pointer - 1] = (EQUAL, prev_text + next_text)
                    diffs[pointer] = (op, text[len(next_text):] + next_text)
                    del diffs[pointer + 1]
                    changes = True
            pointer += 1

        if changes:
            self.cleanup_merge(diffs)

    def cleanup_semantic(self, diffs: _Diffs) -> None:
        """
        Reduce the number of edits by eliminating semantically trivial
        equalities, then align the remaining edits on natural boundaries.
        """
        changes = False
        equalities: list[int] = []
        last_equality: Optional[str] = None
        pointer = 0
        # Edit lengths before and after the last equality
        insertions1 = deletions1 = 0
        insertions2 = deletions2 = 0
        while pointer < len(diffs):
            op, text = diffs[pointer]
            if op is EQUAL:
                equalities.append(pointer)
                insertions1, insertions2 = insertions2, 0
                deletions1, deletions2 = deletions2, 0
                last_equality = text
            else:
                if op is INSERT:
                    insertions2 += len(text)
                else:
                    deletions2 += len(text)
                if (last_equality and
                        len(last_equality) <= max(insertions1, deletions1) and
                        len(last_equality) <= max(insertions2, deletions2)):
                    # Replace the equality with a deletion and an insertion
                    index = equalities[-1]
                    diffs.insert(index, (DELETE, last_equality))
                    diffs[index + 1] = (INSERT, diffs[index + 1][1])
                    equalities.pop()
                    if equalities:
                        equalities.pop()
                    pointer = equalities[-1] if equalities else -1
                    insertions1 = deletions1 = 0
                    insertions2 = deletions2 = 0
                    last_equality = None
                    changes = True
            pointer += 1

        if changes:
            self.cleanup_merge(diffs)
        self.cleanup_semantic_lossless(diffs)

        # Extract overlaps between a deletion and the following insertion
        pointer = 1
        while pointer < len(diffs):
            if diffs[pointer - 1][0] is DELETE and diffs[pointer][0] is INSERT:
                deletion = diffs[pointer - 1][1]
                insertion = diffs[pointer][1]
                overlap1 = common_overlap(deletion, insertion)
                overlap2 = common_overlap(insertion, deletion)
                if overlap1 >= overlap2:
                    if overlap1 >= len(deletion) / 2 or overlap1 >= len(insertion) / 2:
                        diffs.insert(pointer, (EQUAL, insertion[:overlap1]))
                        diffs[pointer - 1] = (DELETE, deletion[:len(deletion) - overlap1])
                        diffs[pointer + 1] = (INSERT, insertion[overlap1:])
                        pointer += 1
                else:
                    if overlap2 >= len(deletion) / 2 or overlap2 >= len(insertion) / 2:
                        diffs.insert(pointer, (EQUAL, deletion[:overlap2]))
                        diffs[pointer - 1] = (INSERT, insertion[:len(insertion) - overlap2])
                        diffs[pointer + 1] = (DELETE, deletion[overlap2:])
                        pointer += 1
                pointer += 1
            pointer += 1

    def cleanup_semantic_lossless(self, diffs: _Diffs) -> None:
        """Slide single edits sideways onto the best-scoring boundary."""
        pointer = 1
        while pointer < len(diffs) - 1:
            if diffs[pointer - 1][0] is EQUAL and diffs[pointer + 1][0] is EQUAL:
                equality1 = diffs[pointer - 1][1]
                edit = diffs[pointer][1]
                equality2 = diffs[pointer + 1][1]

                # Shift the edit as far left as possible
                offset = common_suffix(equality1, edit)
                if offset:
                    common = edit[-offset:]
                    equality1 = equality1[:-offset]
                    edit = common + edit[:-offset]
                    equality2 = common + equality2

                # Step right one character at a time, keeping the best fit
                best_equality1 = equality1
                best_edit = edit
                best_equality2 = equality2
                best_score = (_semantic_score(equality1, edit) +
                              _semantic_score(edit, equality2))
                while edit and equality2 and edit[0] == equality2[0]:
                    equality1 += edit[0]
                    edit = edit[1:] + equality2[0]
                    equality2 = equality2[1:]
                    score = (_semantic_score(equality1, edit) +
                             _semantic_score(edit, equality2))
                    # >= favours the rightmost boundary
                    if score >= best_score:
                        best_score = score
                        best_equality1 = equality1
                        best_edit = edit
                        best_equality2 = equality2

                if diffs[pointer - 1][1] != best_equality1:
                    if best_equality1:
                        diffs[pointer - 1] = (EQUAL, best_equality1)
                    else:
                        del diffs[pointer - 1]
                        pointer -= 1
                    diffs[pointer] = (diffs[pointer][0], best_edit)
                    if best_equality2:
                        diffs[pointer + 1] = (EQUAL, best_equality2)
                    else:
                        del diffs[pointer + 1]
                        pointer -= 1
            pointer += 1


def diff(
    text_a: str,
    text_b: str,
    options: Optional[DiffOptions] = None
) -> list[DiffOp]:
    """Convenience wrapper around SequenceDiffer.diff."""
    return SequenceDiffer(options).diff(text_a, text_b)
