"""Tests for building search terms from file names"""
import pytest

from system_utils.helpers import build_query_from_file_name, same_path


@pytest.mark.parametrize("name, expected", [
    ("My-Song_Name", "My Song Name"),
    ("My Song Name", "My Song Name"),
    ("Artist_-_Song", "Artist - Song"),
    ("Artist - Song", "Artist - Song"),
    ("  lots   of\tspace  ", "lots of space"),
    ("__--__", ""),
    ("", ""),
])
def test_build_query(name, expected):
    assert build_query_from_file_name(name) == expected


def test_separators_and_spaces_give_same_query():
    assert build_query_from_file_name("My-Song_Name") == build_query_from_file_name("My Song Name")


@pytest.mark.parametrize("name", ["Artist_-_Song", "a--b__c", " x - y-z ", "-lead", "trail-"])
def test_normalization_is_a_fixed_point(name):
    once = build_query_from_file_name(name)
    assert build_query_from_file_name(once) == once


def test_same_path_ignores_case():
    assert same_path("/Music/Song.mp3", "/music/song.MP3")
    assert not same_path("/Music/Song.mp3", "/Music/Other.mp3")
    assert not same_path(None, "/Music/Song.mp3")
