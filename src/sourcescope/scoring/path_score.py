"""Fuzzy file-path scoring by case-insensitive subsequence alignment."""

from __future__ import annotations

import re
from array import array

BASE_CHAR_SCORE = 10
PATH_TOKEN_START_BONUS = 4
WORD_START_BONUS = 2
CAPS_MATCH_BONUS = 6
FILE_NAME_BONUS = 4
FILE_NAME_FIRST_CHAR_BONUS = 5
FILE_NAME_WORD_START_BONUS = 3
SEQUENCE_PATH_TOKEN_START_BONUS = 5
SEQUENCE_LENGTH_BONUS = 4

_WORD_SEPARATORS = frozenset("_-/.")


def fold_case(text: str) -> str:
    """Upper-case text one character at a time, preserving its length."""
    return "".join(_fold_char(char) for char in text)


def _fold_char(char: str) -> str:
    upper = char.upper()
    if len(upper) != 1:
        return char
    return upper


class FilePathScorer:
    """Scores candidate paths against one query.

    The scorer owns two scratch tables (best score and run length) that grow
    to the largest ``len(query) * len(data)`` seen and are reused across calls,
    so one instance should be kept for as long as the query text is unchanged.
    """

    def __init__(self, query: str) -> None:
        self._query = query
        self._query_upper = fold_case(query)
        self._filter = filter_regex(query)
        self._score = array("i")
        self._sequence = array("i")
        self._data = ""
        self._data_upper = ""
        self._file_name_index = -1

    @property
    def query(self) -> str:
        """Return the query this scorer was built for."""
        return self._query

    def may_match(self, data: str) -> bool:
        """Return False when ``data`` cannot score, without filling the tables."""
        return self._filter.search(fold_case(data)) is not None

    def score(self, data: str, match_indexes: list[int] | None = None) -> int:
        """Return the alignment score of the query against ``data``.

        When ``match_indexes`` is given and the query matches, it is extended
        with the ascending offsets of the consumed characters of ``data``.
        """
        if not data or not self._query:
            return 0
        n = len(self._query)
        m = len(data)
        if len(self._score) < n * m:
            self._score = array("i", [0]) * (n * m * 2)
            self._sequence = array("i", [0]) * (n * m * 2)
        score = self._score
        sequence = self._sequence
        self._data = data
        self._data_upper = fold_case(data)
        self._file_name_index = data.rfind("/")

        for i in range(n):
            row = i * m
            prev_row = row - m
            for j in range(m):
                skip_char_score = score[row + j - 1] if j else 0
                if i and j:
                    prev_char_score = score[prev_row + j - 1]
                    consecutive_match = sequence[prev_row + j - 1]
                else:
                    prev_char_score = 0
                    consecutive_match = 0
                pick_char_score = 0
                # query[:i] must already be aligned inside data[:j]
                if i == 0 or prev_char_score > 0:
                    pick_char_score = self._match(i, j, consecutive_match)
                if pick_char_score and prev_char_score + pick_char_score >= skip_char_score:
                    sequence[row + j] = consecutive_match + 1
                    score[row + j] = prev_char_score + pick_char_score
                else:
                    sequence[row + j] = 0
                    score[row + j] = skip_char_score

        result = score[n * m - 1]
        if match_indexes is not None and result > 0:
            match_indexes.extend(self._restore_match_indexes(n, m))
        return result

    def _restore_match_indexes(self, n: int, m: int) -> list[int]:
        sequence = self._sequence
        output: list[int] = []
        i = n - 1
        j = m - 1
        while i >= 0 and j >= 0:
            if sequence[i * m + j] == 0:
                j -= 1
                continue
            output.append(j)
            i -= 1
            j -= 1
        output.reverse()
        return output

    def _is_word_start(self, j: int) -> bool:
        if j == 0:
            return True
        data = self._data
        upper = self._data_upper
        if data[j - 1] in _WORD_SEPARATORS:
            return True
        return data[j - 1] != upper[j - 1] and data[j] == upper[j]

    def _is_path_token_start(self, j: int) -> bool:
        return j == 0 or self._data[j - 1] == "/"

    def _single_char_score(self, i: int, j: int) -> int:
        is_word_start = self._is_word_start(j)
        is_file_name = j > self._file_name_index
        is_caps_match = (
            self._query[i] == self._data[j] and self._query[i] == self._query_upper[i]
        )
        value = BASE_CHAR_SCORE
        if self._is_path_token_start(j):
            value += PATH_TOKEN_START_BONUS
        if is_word_start:
            value += WORD_START_BONUS
        if is_caps_match:
            value += CAPS_MATCH_BONUS
        if is_file_name:
            value += FILE_NAME_BONUS
        if i == 0 and j == self._file_name_index + 1:
            value += FILE_NAME_FIRST_CHAR_BONUS
        if is_file_name and is_word_start:
            value += FILE_NAME_WORD_START_BONUS
        return value

    def _sequence_char_score(self, sequence_start: int, sequence_length: int) -> int:
        value = BASE_CHAR_SCORE
        if sequence_start > self._file_name_index:
            value += FILE_NAME_BONUS
        if self._is_path_token_start(sequence_start):
            value += SEQUENCE_PATH_TOKEN_START_BONUS
        value += sequence_length * SEQUENCE_LENGTH_BONUS
        return value

    def _match(self, i: int, j: int, consecutive_match: int) -> int:
        if self._query_upper[i] != self._data_upper[j]:
            return 0
        if not consecutive_match:
            return self._single_char_score(i, j)
        return self._sequence_char_score(j - consecutive_match, consecutive_match)


def score_path(query: str, data: str, match_indexes: list[int] | None = None) -> int:
    """Score ``data`` against ``query`` with a throwaway scorer."""
    return FilePathScorer(query).score(data, match_indexes)


def filter_regex(query: str) -> re.Pattern[str]:
    """Compile a case-insensitive regex accepting any string with ``query`` as a subsequence.

    Searching ``fold_case(data)`` accepts every path the scorer gives a positive score.
    """
    parts: list[str] = []
    for position, char in enumerate(fold_case(query)):
        escaped = re.escape(char)
        if position:
            parts.append(f"[^{escaped}]*")
        parts.append(escaped)
    return re.compile("".join(parts), re.IGNORECASE)
