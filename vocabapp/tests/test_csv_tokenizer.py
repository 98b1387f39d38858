from vocabapp.imports.tokenizer import tokenize_csv


def test_quoted_comma_stays_in_one_field() -> None:
    assert tokenize_csv('a,"b,c",d') == [["a", "b,c", "d"]]


def test_quoted_newline_and_escaped_quote() -> None:
    content = 'term,exampleSentence\nquote,"She said ""hi""\nthen left"\n'
    assert tokenize_csv(content) == [
        ["term", "exampleSentence"],
        ["quote", 'She said "hi"\nthen left'],
    ]


def test_all_line_endings_split_rows() -> None:
    assert tokenize_csv("a,b\r\nc,d\re,f\ng,h") == [["a", "b"], ["c", "d"], ["e", "f"], ["g", "h"]]


def test_trailing_blank_line_is_dropped() -> None:
    assert tokenize_csv("term\nalpha\n") == [["term"], ["alpha"]]
    assert tokenize_csv("term\r\nalpha\r\n") == [["term"], ["alpha"]]


def test_empty_input_has_no_rows() -> None:
    assert tokenize_csv("") == []


def test_empty_fields_are_kept() -> None:
    assert tokenize_csv("term,definition\n,x\nfoo,") == [["term", "definition"], ["", "x"], ["foo", ""]]


def test_tokenizer_is_repeatable() -> None:
    content = 'x,"y\nz"\n1,2'
    assert tokenize_csv(content) == tokenize_csv(content)


def test_blank_lines_at_end_are_dropped() -> None:
    assert tokenize_csv("term\nfoo\n\n") == [["term"], ["foo"]]
    assert tokenize_csv("term\r\nfoo\r\n\r\n\r\n") == [["term"], ["foo"]]


def test_blank_line_in_the_middle_is_kept() -> None:
    assert tokenize_csv("term\n\nfoo\n") == [["term"], [""], ["foo"]]
