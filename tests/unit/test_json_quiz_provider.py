"""
Unit Tests: JSON quiz configuration provider

Тестирует:
- Загрузку test-config.json, questions.json, personality-types.json
- Значения по умолчанию при отсутствии файлов
- Валидацию конфигурации
- Кэширование и перезагрузку
"""

import json
from pathlib import Path

import pytest

from profiling_bot.domain.exceptions import ConfigurationError
from profiling_bot.infrastructure.configuration import DEFAULT_SETTINGS, JsonQuizConfigurationProvider

REPO_CONFIG_DIR = Path(__file__).resolve().parents[2] / "config"


# ============================================================================
# FIXTURES
# ============================================================================

SETTINGS = {
    "name": "Профайлинг",
    "welcomeMessage": "Привет!",
    "channelLink": "https://t.me/channel",
    "introMessage": "Поехали!",
    "completionMessage": "Готово!",
    "totalQuestions": 2,
    "answersPerQuestion": 2,
}

QUESTIONS = [
    {
        "id": 1,
        "text": "Вопрос 1",
        "answers": [
            {"id": 1, "text": "А", "idPersonalityType": 1},
            {"id": 2, "text": "Б", "idPersonalityType": 2},
        ],
    },
    {
        "id": 2,
        "text": "Вопрос 2",
        "answers": [
            {"id": 1, "text": "В", "idPersonalityType": 2},
            {"id": 2, "text": "Г", "idPersonalityType": 1},
        ],
    },
]

TYPES = [
    {"id": 2, "name": "Творческий", "fullName": "Творческий тип"},
    {"id": 1, "name": "Социальный", "shortName": "СОЦ", "shareTemplate": "{user_name}: {type_name}"},
]


def write_config(config_dir: Path, settings=SETTINGS, questions=QUESTIONS, types=TYPES):
    config_dir.mkdir(parents=True, exist_ok=True)
    if settings is not None:
        (config_dir / "test-config.json").write_text(json.dumps(settings, ensure_ascii=False), encoding="utf-8")
    if questions is not None:
        (config_dir / "questions.json").write_text(json.dumps(questions, ensure_ascii=False), encoding="utf-8")
    if types is not None:
        (config_dir / "personality-types.json").write_text(json.dumps(types, ensure_ascii=False), encoding="utf-8")


class FakeMonotonic:
    def __init__(self):
        self.value = 0.0

    def __call__(self):
        return self.value


# ============================================================================
# LOADING TESTS
# ============================================================================

@pytest.mark.asyncio
async def test_load_configuration(tmp_path):
    """
    Тест: Конфигурация читается из трёх файлов
    """
    write_config(tmp_path)
    provider = JsonQuizConfigurationProvider(tmp_path)

    settings = await provider.get_settings()
    questions = await provider.get_questions()
    categories = await provider.get_categories()

    assert settings.name == "Профайлинг"
    assert settings.channel_link == "https://t.me/channel"
    assert await provider.get_total_question_count() == 2

    assert [q.id for q in questions] == [1, 2]
    assert questions[1].get_answer(1).category_id == 2

    assert [c.id for c in categories] == [1, 2]
    assert categories[0].short_name == "СОЦ"
    assert categories[1].title == "Творческий тип"

    assert (await provider.get_question(2)).text == "Вопрос 2"
    assert await provider.get_question(5) is None
    assert (await provider.get_category(1)).name == "Социальный"


@pytest.mark.asyncio
async def test_missing_settings_file_uses_defaults(tmp_path):
    write_config(tmp_path, settings=None)
    provider = JsonQuizConfigurationProvider(tmp_path)

    assert await provider.get_settings() == DEFAULT_SETTINGS


@pytest.mark.asyncio
async def test_missing_questions_file_gives_empty_list(tmp_path):
    write_config(tmp_path, questions=None)
    provider = JsonQuizConfigurationProvider(tmp_path)

    assert await provider.get_questions() == []
    with pytest.raises(ConfigurationError):
        await provider.validate()


@pytest.mark.asyncio
async def test_invalid_json_raises(tmp_path):
    write_config(tmp_path)
    (tmp_path / "questions.json").write_text("{not json", encoding="utf-8")
    provider = JsonQuizConfigurationProvider(tmp_path)

    with pytest.raises(ConfigurationError):
        await provider.get_questions()


@pytest.mark.asyncio
async def test_schema_error_raises(tmp_path):
    write_config(tmp_path, questions=[{"id": "first", "text": "?"}])
    provider = JsonQuizConfigurationProvider(tmp_path)

    with pytest.raises(ConfigurationError) as exc_info:
        await provider.get_questions()

    assert exc_info.value.code == "CONFIGURATION_ERROR"


# ============================================================================
# VALIDATION TESTS
# ============================================================================

@pytest.mark.asyncio
async def test_validate_passes(tmp_path):
    write_config(tmp_path)

    await JsonQuizConfigurationProvider(tmp_path).validate()


@pytest.mark.asyncio
async def test_bundled_configuration_is_valid():
    """
    Тест: Конфигурация из репозитория проходит валидацию (8 вопросов по 5 ответов)
    """
    provider = JsonQuizConfigurationProvider(REPO_CONFIG_DIR)

    await provider.validate()

    questions = await provider.get_questions()
    assert len(questions) == 8
    assert all(len(q.answers) == 5 for q in questions)
    assert len(await provider.get_categories()) == 5


@pytest.mark.parametrize(
    "settings,questions,types",
    [
        # question count differs from totalQuestions
        ({**SETTINGS, "totalQuestions": 3}, QUESTIONS, TYPES),
        # answer references an unknown personality type
        (SETTINGS, [QUESTIONS[0], {**QUESTIONS[1], "answers": [{"id": 1, "text": "?", "idPersonalityType": 9}]}], TYPES),
        # duplicate question ids
        (SETTINGS, [QUESTIONS[0], {**QUESTIONS[1], "id": 1}], TYPES),
        # duplicate answer ids
        (SETTINGS, [QUESTIONS[0], {**QUESTIONS[1], "answers": [QUESTIONS[1]["answers"][0]] * 2}], TYPES),
        # question without answers
        (SETTINGS, [QUESTIONS[0], {**QUESTIONS[1], "answers": []}], TYPES),
        # no personality types
        (SETTINGS, QUESTIONS, []),
        # personality type id below 1
        (SETTINGS, QUESTIONS, TYPES + [{"id": 0, "name": "Нулевой"}]),
        # empty bot name
        ({**SETTINGS, "name": ""}, QUESTIONS, TYPES),
        # share template with an unknown placeholder
        (SETTINGS, QUESTIONS, [TYPES[0], {**TYPES[1], "shareTemplate": "{user_name} из {city}"}]),
        # positional share template
        (SETTINGS, QUESTIONS, [TYPES[0], {**TYPES[1], "shareTemplate": "{0} прошёл тест"}]),
        # unterminated share template placeholder
        (SETTINGS, QUESTIONS, [TYPES[0], {**TYPES[1], "shareTemplate": "{user_name"}]),
    ],
)
@pytest.mark.asyncio
async def test_validate_rejects_inconsistent_config(tmp_path, settings, questions, types):
    """
    Тест: Несогласованная конфигурация отклоняется
    """
    write_config(tmp_path, settings=settings, questions=questions, types=types)

    with pytest.raises(ConfigurationError):
        await JsonQuizConfigurationProvider(tmp_path).validate()


@pytest.mark.asyncio
async def test_answer_count_mismatch_only_warns(tmp_path):
    write_config(tmp_path, settings={**SETTINGS, "answersPerQuestion": 5})

    await JsonQuizConfigurationProvider(tmp_path).validate()


# ============================================================================
# CACHE TESTS
# ============================================================================

@pytest.mark.asyncio
async def test_configuration_is_cached_until_reload(tmp_path):
    """
    Тест: Изменения файлов видны только после reload()
    """
    write_config(tmp_path)
    provider = JsonQuizConfigurationProvider(tmp_path)
    assert (await provider.get_settings()).welcome_message == "Привет!"

    write_config(tmp_path, settings={**SETTINGS, "welcomeMessage": "Здравствуйте!"})
    assert (await provider.get_settings()).welcome_message == "Привет!"

    await provider.reload()
    assert (await provider.get_settings()).welcome_message == "Здравствуйте!"


@pytest.mark.asyncio
async def test_cache_ttl_expires(tmp_path):
    """
    Тест: С cache_ttl конфигурация перечитывается после истечения срока
    """
    write_config(tmp_path)
    clock = FakeMonotonic()
    provider = JsonQuizConfigurationProvider(tmp_path, cache_ttl=60, clock=clock)
    await provider.get_settings()

    write_config(tmp_path, settings={**SETTINGS, "name": "Новый тест"})
    clock.value = 30
    assert (await provider.get_settings()).name == "Профайлинг"

    clock.value = 61
    assert (await provider.get_settings()).name == "Новый тест"


@pytest.mark.asyncio
async def test_invalid_configuration_not_picked_up_on_ttl(tmp_path):
    """
    Тест: После истечения TTL невалидная конфигурация не подменяет рабочую
    """
    write_config(tmp_path)
    clock = FakeMonotonic()
    provider = JsonQuizConfigurationProvider(tmp_path, cache_ttl=60, clock=clock)
    await provider.validate()

    broken = [QUESTIONS[0], {**QUESTIONS[1], "answers": [{"id": 1, "text": "?", "idPersonalityType": 99}]}]
    write_config(tmp_path, questions=broken)
    clock.value = 61

    questions = await provider.get_questions()

    assert [a.category_id for a in questions[1].answers] == [2, 1]
    await provider.validate()

    write_config(tmp_path, settings={**SETTINGS, "name": "Новый тест"})
    clock.value = 200
    assert (await provider.get_settings()).name == "Новый тест"


@pytest.mark.asyncio
async def test_invalid_reload_keeps_previous_configuration(tmp_path):
    """
    Тест: reload() с ошибкой в файлах бросает ConfigurationError и оставляет прежние данные
    """
    write_config(tmp_path)
    provider = JsonQuizConfigurationProvider(tmp_path)
    await provider.validate()

    write_config(tmp_path, settings={**SETTINGS, "totalQuestions": 5, "name": "Новый тест"})

    with pytest.raises(ConfigurationError):
        await provider.reload()

    assert (await provider.get_settings()).name == "Профайлинг"
    assert len(await provider.get_questions()) == 2
    await provider.validate()
