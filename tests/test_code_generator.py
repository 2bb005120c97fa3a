"""
Tests for random code generation.
"""
import asyncio
import logging
import random
import string

import pytest
from pydantic import ValidationError

from main import create_app, reserved_path_segments
from shortlink_app.config import Settings
from shortlink_app.exceptions import CodeGenerationError
from shortlink_app.models.link import ShortLink
from shortlink_app.services.code_generator import CodeGenerator


ALPHABET = string.ascii_uppercase + string.ascii_lowercase + string.digits


def generate(generator, session_factory):
    async def scenario():
        async with session_factory() as db:
            return await generator.generate(db)
    return asyncio.run(scenario())


class TestSampling:
    """Candidate codes drawn from the alphabet"""

    @pytest.mark.parametrize("length", [1, 5, 7, 12])
    def test_length_and_alphabet(self, length):
        """Every sample has exactly L characters, all from the alphabet"""
        generator = CodeGenerator(length=length, alphabet=ALPHABET, rng=random.Random(42))

        for _ in range(200):
            code = generator.sample()
            assert len(code) == length
            assert set(code) <= set(ALPHABET)

    def test_uses_whole_alphabet(self):
        """Draws are spread over the alphabet, not stuck on a prefix"""
        generator = CodeGenerator(length=8, alphabet="abcd", rng=random.Random(7))

        seen = set()
        for _ in range(50):
            seen.update(generator.sample())

        assert seen == set("abcd")

    def test_seeded_rng_is_reproducible(self):
        first = CodeGenerator(length=7, alphabet=ALPHABET, rng=random.Random(1))
        second = CodeGenerator(length=7, alphabet=ALPHABET, rng=random.Random(1))

        assert [first.sample() for _ in range(5)] == [second.sample() for _ in range(5)]


class TestConfiguration:
    """Rejecting and flagging bad configurations"""

    @pytest.mark.parametrize("length, alphabet", [(0, ALPHABET), (-3, ALPHABET), (7, ""), (7, "AAB")])
    def test_invalid_configuration(self, length, alphabet):
        with pytest.raises(ValueError):
            CodeGenerator(length=length, alphabet=alphabet)

    def test_invalid_max_attempts(self):
        with pytest.raises(ValueError):
            CodeGenerator(length=7, alphabet=ALPHABET, max_attempts=0)

    def test_small_keyspace_warns(self, caplog):
        """Alphabet of size 1 (or any tiny keyspace) is logged at construction"""
        with caplog.at_level(logging.WARNING, logger="shortlink_app"):
            CodeGenerator(length=3, alphabet="A")

        assert "keyspace" in caplog.text

    def test_default_keyspace_does_not_warn(self, caplog):
        with caplog.at_level(logging.WARNING, logger="shortlink_app"):
            CodeGenerator(length=7, alphabet=ALPHABET)

        assert caplog.text == ""

    @pytest.mark.parametrize("overrides", [
        {"code_length": 0},
        {"code_alphabet": ""},
        {"code_alphabet": "abca"},
        {"max_insert_retries": 0},
    ])
    def test_settings_reject_bad_values(self, overrides):
        with pytest.raises(ValidationError):
            Settings(_env_file=None, **overrides)

    def test_settings_defaults(self):
        settings = Settings(_env_file=None)

        assert settings.code_length == 7
        assert settings.code_alphabet == ALPHABET
        assert settings.cache_ttl == 3600


class TestUniqueness:
    """Collision checks against the database"""

    def test_generates_code_against_empty_store(self, session_factory):
        generator = CodeGenerator(length=7, alphabet=ALPHABET)

        code = generate(generator, session_factory)

        assert len(code) == 7
        assert set(code) <= set(ALPHABET)

    def test_never_returns_existing_code(self, session_factory, seed_link):
        """With 'A' taken from a two-code keyspace, only 'B' can come out"""
        seed_link("A")
        generator = CodeGenerator(length=1, alphabet="AB", rng=random.Random(0))

        codes = {generate(generator, session_factory) for _ in range(20)}

        assert codes == {"B"}

    def test_reserved_codes_are_skipped(self, session_factory):
        """A code equal to a fixed route is never handed out"""
        generator = CodeGenerator(
            length=1, alphabet="AB", rng=random.Random(0), reserved_codes={"A"},
        )

        codes = {generate(generator, session_factory) for _ in range(20)}

        assert codes == {"B"}

    def test_only_reserved_codes_exhaust(self, session_factory):
        generator = CodeGenerator(length=1, alphabet="A", max_attempts=3, reserved_codes={"A"})

        with pytest.raises(CodeGenerationError):
            generate(generator, session_factory)

    def test_max_attempts_exhausted(self, session_factory, seed_link):
        seed_link("A")
        generator = CodeGenerator(length=1, alphabet="A", max_attempts=5)

        with pytest.raises(CodeGenerationError):
            generate(generator, session_factory)

    def test_generator_does_not_write(self, session_factory, count_links):
        generator = CodeGenerator(length=7, alphabet=ALPHABET)

        for _ in range(3):
            generate(generator, session_factory)

        assert count_links() == 0


class TestReservedPathSegments:
    def test_collects_first_segment_of_fixed_routes(self):
        app = create_app(Settings(_env_file=None, cache_backend="null"))

        segments = reserved_path_segments(app)

        assert {"health", "docs", "redoc", "openapi.json", "shorten", "api"} <= segments
        assert not any(segment.startswith("{") for segment in segments)


class TestShortLinkModel:
    def test_code_column_is_not_sized_from_import_time_settings(self):
        """code_length varies per app, so the column carries no fixed length"""
        assert ShortLink.__table__.c.code.type.length is None
        assert ShortLink.__table__.c.code.unique
