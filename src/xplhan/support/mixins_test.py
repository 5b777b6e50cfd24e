import unittest

from hamcrest import assert_that, is_, is_not, equal_to

from xplhan.support.mixins import CommonEqualityMixin, StringerMixin, quote


class Value(CommonEqualityMixin, StringerMixin):
    def __init__(self, a, b=None):
        self.a = a
        self.b = b


class Other(CommonEqualityMixin):
    def __init__(self, a, b=None):
        self.a = a
        self.b = b


class CommonEqualityMixinTest(unittest.TestCase):
    def test_equal_when_fields_equal(self):
        assert_that(Value(1, 'x'), is_(equal_to(Value(1, 'x'))))

    def test_not_equal_when_fields_differ(self):
        assert_that(Value(1, 'x'), is_not(equal_to(Value(1, 'y'))))
        assert_that(Value(1, 'x') != Value(2, 'x'), is_(True))

    def test_not_equal_to_other_types(self):
        assert_that(Value(1) == Other(1), is_(False))
        assert_that(Value(1) == 1, is_(False))


class StringerMixinTest(unittest.TestCase):
    def test_str_lists_sorted_fields(self):
        assert_that(str(Value(1, 'x')), is_("Value:{'a': '1', 'b': 'x'}"))

    def test_repr_matches_str(self):
        assert_that(repr(Value(1, 'x')), is_(str(Value(1, 'x'))))

    def test_none_is_unquoted(self):
        assert_that(quote(None), is_("None"))
        assert_that(str(Value(2)), is_("Value:{'a': '2', 'b': None}"))


if __name__ == '__main__':  # pragma: no cover
    unittest.main()
