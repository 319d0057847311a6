import pytest

SAMPLE_PROGRAM = """\
REM Sum the numbers 1..10 and print a factorial
DEF fact(n)
  IF n <= 1 THEN RETURN 1 ENDIF
  RETURN n * fact(n - 1)
ENDDEF

x := 10 : total := 0
WHILE x > 0 DO
  total := total + x
  x := x - 1
ENDWHILE
PRINT "total"; total; fact(5)
END
"""


@pytest.fixture  # type: ignore[misc]
def sample_program() -> str:
    return SAMPLE_PROGRAM
