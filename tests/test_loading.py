"""Scenario loading tests"""
import pytest
import json
import logging
from pathlib import Path

import numpy as np

from space_tree.buffer import FrameBuffer
from space_tree.loading import (list_frames_in_dir, load_json_file, transform_from_json,
                                parse_frame, load_scenario, load_frames_from_dir)

__all__ = ['TestFiles', 'TestRecords', 'TestScenario']

def frame_record(name: str, parent: str, translation=(0, 0, 0), rotation=(0, 0, 0, 1),
                 **extra) -> dict:
    """JSON frame record"""
    record = {
        'child_frame_id': name,
        'parent_frame_id': parent,
        'transform': {
            'translation': dict(zip('xyz', translation)),
            'rotation': dict(zip('xyzw', rotation)),
        },
    }
    record.update(extra)
    return record

def write_record(directory: Path, filename: str, record) -> Path:
    path = directory / filename
    path.write_text(record if isinstance(record, str) else json.dumps(record), encoding='utf-8')
    return path

@pytest.fixture
def scenario(tmp_path: Path) -> Path:
    """Two valid frames, one of each kind of malformed record, and a non JSON file"""
    write_record(tmp_path, 'a.json', frame_record('a', 'world', (1, 0, 0),
                                                  json_metadata='{"foo": "bar"}'))
    write_record(tmp_path, 'b.json', frame_record('b', 'a', (0, 1, 0)))
    write_record(tmp_path, 'no_parent.json', {'child_frame_id': 'c', 'transform': {}})
    write_record(tmp_path, 'bad_rotation.json', frame_record('d', 'a', rotation=(0, 0, 0, 0)))
    write_record(tmp_path, 'bad_translation.json', frame_record('e', 'a', translation=(0, 'x', 0)))
    write_record(tmp_path, 'broken.json', '{"child_frame_id": ')
    write_record(tmp_path, 'list.json', '[1, 2, 3]')
    write_record(tmp_path, 'notes.txt', 'not a frame')
    return tmp_path

class TestFiles():
    def test_list_frames_in_dir(self, scenario: Path):
        names = [Path(p).name for p in list_frames_in_dir(scenario)]

        assert names == sorted(names)
        assert 'a.json' in names and 'notes.txt' not in names
        assert len(names) == 7

    def test_missing_dir(self, tmp_path: Path, caplog: pytest.LogCaptureFixture):
        with caplog.at_level(logging.WARNING, logger='space_tree'):
            assert list_frames_in_dir(tmp_path / 'missing') == []
        assert 'Empty scenario is loaded' in caplog.text

    def test_load_json_file(self, scenario: Path, caplog: pytest.LogCaptureFixture):
        assert load_json_file(scenario / 'a.json')['child_frame_id'] == 'a'

        with caplog.at_level(logging.WARNING, logger='space_tree'):
            assert load_json_file(scenario / 'broken.json') is None
            assert load_json_file(scenario / 'list.json') is None
            assert load_json_file(scenario / 'missing.json') is None
        assert len(caplog.records) == 3

class TestRecords():
    def test_parse_frame(self):
        frame = parse_frame(frame_record('a', 'world', (1, 2, 3), (0, 0, 1, 0),
                                         json_metadata='meta'), now=2.)

        assert (frame.name, frame.parent_name, frame.metadata, frame.freshness) \
            == ('a', 'world', 'meta', 2.)
        assert np.allclose(frame.transform.translation, [1, 2, 3])
        assert np.allclose(frame.transform.apply([1, 0, 0]), [0, 2, 3])

    def test_default_metadata(self):
        assert parse_frame(frame_record('a', 'world')).metadata == ''
        assert parse_frame(frame_record('a', 'world', json_metadata={'k': 1})).metadata == ''

    @pytest.mark.parametrize('field', ['child_frame_id', 'parent_frame_id', 'transform'])
    def test_missing_field(self, field: str, caplog: pytest.LogCaptureFixture):
        record = frame_record('a', 'world')
        del record[field]

        with caplog.at_level(logging.WARNING, logger='space_tree'):
            assert parse_frame(record) is None
        assert field in caplog.text

    def test_mistyped_name(self):
        assert parse_frame(frame_record(7, 'world')) is None

    @pytest.mark.parametrize('value', [
        None,
        [],
        {'translation': {'x': 0, 'y': 0, 'z': 0}},
        {'translation': {'x': 0, 'y': 0}, 'rotation': {'x': 0, 'y': 0, 'z': 0, 'w': 1}},
        {'translation': {'x': 0, 'y': 0, 'z': True}, 'rotation': {'x': 0, 'y': 0, 'z': 0, 'w': 1}},
        {'translation': {'x': 0, 'y': 0, 'z': 0}, 'rotation': {'x': 0, 'y': 0, 'z': 0, 'w': 0}},
        {'translation': {'x': 10**400, 'y': 0, 'z': 0}, 'rotation': {'x': 0, 'y': 0, 'z': 0, 'w': 1}},
        {'translation': {'x': float('nan'), 'y': 0, 'z': 0}, 'rotation': {'x': 0, 'y': 0, 'z': 0, 'w': 1}},
        {'translation': {'x': 0, 'y': 0, 'z': 0}, 'rotation': {'x': 0, 'y': 0, 'z': float('inf'), 'w': 1}},
    ])
    def test_malformed_transform(self, value):
        assert transform_from_json(value) is None

    def test_unnormalized_quaternion(self):
        T = transform_from_json({'translation': {'x': 0, 'y': 0, 'z': 0},
                                 'rotation': {'x': 0, 'y': 0, 'z': 0, 'w': 2}})
        assert np.allclose(T.as_quaternion(), [0, 0, 0, 1])

class TestScenario():
    def test_load_scenario(self, scenario: Path, caplog: pytest.LogCaptureFixture):
        with caplog.at_level(logging.WARNING, logger='space_tree'):
            frames = load_scenario(list_frames_in_dir(scenario))

        assert sorted(frames) == ['a', 'b']
        assert frames['a'].metadata == '{"foo": "bar"}'
        assert 'Skipping malformed frame file' in caplog.text

    def test_bad_records_do_not_abort_batch(self, tmp_path: Path,
                                            caplog: pytest.LogCaptureFixture):
        """Every kind of broken file is skipped and the valid frame still loads"""
        write_record(tmp_path, 'a.json', frame_record('a', 'world', (1, 0, 0)))
        (tmp_path / 'encoding.json').write_bytes(b'{"child_frame_id": "\xff\xfe"}')
        (tmp_path / 'bom.json').write_bytes(b'\xff\xfe')
        (tmp_path / 'oversized.json').write_text(
            '{"child_frame_id": "b", "parent_frame_id": "a", "transform": '
            '{"translation": {"x": 1' + '0'*400 + ', "y": 0, "z": 0}, '
            '"rotation": {"x": 0, "y": 0, "z": 0, "w": 1}}}', encoding='utf-8')
        write_record(tmp_path, 'infinite.json', frame_record('c', 'a', (float('inf'), 0, 0)))
        write_record(tmp_path, 'nested.json', '[' * 100000 + ']' * 100000)
        write_record(tmp_path, 'list.json', '[1, 2, 3]')
        write_record(tmp_path, 'no_parent.json', {'child_frame_id': 'd', 'transform': {}})

        with caplog.at_level(logging.WARNING, logger='space_tree'):
            frames = load_scenario(list_frames_in_dir(tmp_path))

        assert list(frames) == ['a']
        assert np.allclose(frames['a'].transform.translation, [1, 0, 0])
        assert len([r for r in caplog.records if r.name == 'space_tree.loading']) >= 7

    def test_bad_encoding_in_buffer_load(self, tmp_path: Path):
        write_record(tmp_path, 'a.json', frame_record('a', 'world'))
        (tmp_path / 'b.json').write_bytes(b'\xff\xfe')
        buffer = FrameBuffer()

        assert load_frames_from_dir(tmp_path, buffer) == 1
        assert list(buffer.snapshot()) == ['a']

    def test_later_files_win(self, tmp_path: Path):
        first = write_record(tmp_path, '1.json', frame_record('a', 'world', (1, 0, 0)))
        second = write_record(tmp_path, '2.json', frame_record('a', 'world', (2, 0, 0)))

        frames = load_scenario([first, second])
        assert np.allclose(frames['a'].transform.translation, [2, 0, 0])

    def test_load_frames_from_dir(self, scenario: Path):
        write_record(scenario, 'world.json', frame_record('world', 'a'))
        buffer = FrameBuffer()

        assert load_frames_from_dir(scenario, buffer) == 3
        assert sorted(buffer.snapshot()) == ['a', 'b']
        assert np.allclose(buffer.lookup('world', 'b').transform.translation, [1, 1, 0])
