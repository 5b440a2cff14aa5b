#!/usr/bin/env python3
"""Shared fixtures for langxml tests."""

import pytest

from langxml.format_handlers.language_xml import LanguageXmlHandler


LANGUAGE_XML = """<?xml version="1.0" encoding="utf-8"?>
<Language xmlns:xsi="http://www.w3.org/2001/XMLSchema-instance" xmlns:xsd="http://www.w3.org/2001/XMLSchema">
  <Name>English</Name>
  <Code>EN</Code>
  <Font>font_english</Font>
  <Reagents>
    <RecordReagent>
      <Key>Iron</Key>
      <Value>Iron</Value>
      <Unit>g</Unit>
    </RecordReagent>
  </Reagents>
  <Things>
    <RecordThing>
      <Key>Lamp</Key>
      <Value>Lamp</Value>
      <Description>A light source.</Description>
    </RecordThing>
    <RecordThing>
      <Key>ItemWrench</Key>
      <Value>Wrench</Value>
      <Description>Tightens things.</Description>
    </RecordThing>
  </Things>
  <Keys>
    <Record>
      <Key>Jump</Key>
      <Value>Jump</Value>
    </Record>
  </Keys>
  <ScreenSpaceToolTips>
    <Record>
      <Key>ScreenSpaceToolTipPower</Key>
      <Value>Power</Value>
    </Record>
  </ScreenSpaceToolTips>
  <GameTip>
    <String>Remember to breathe.</String>
    <String>Wear a suit.</String>
  </GameTip>
  <HelpPage>
    <StationpediaPage>
      <Key>Atmospherics</Key>
      <Title>Atmospherics</Title>
      <Text>Gas behaves.</Text>
    </StationpediaPage>
  </HelpPage>
</Language>
"""

EXPECTED_KEYS = [
    "Iron_Value",
    "Iron_Unit",
    "Lamp_Value",
    "Lamp_Description",
    "ItemWrench_Value",
    "ItemWrench_Description",
    "ScreenSpaceToolTipPower_Value",
    "Jump_Value",
    "GameTip_1",
    "GameTip_2",
    "Atmospherics_Title",
    "Atmospherics_Text",
]


@pytest.fixture
def handler():
    """Fixture to create LanguageXmlHandler instance."""
    return LanguageXmlHandler()


@pytest.fixture
def document(handler):
    """Parsed LANGUAGE_XML."""
    return handler.parse(LANGUAGE_XML)


@pytest.fixture
def source_file(tmp_path):
    """LANGUAGE_XML written to disk as english.xml."""
    path = tmp_path / "english.xml"
    path.write_text(LANGUAGE_XML, encoding="utf-8")
    return path
