import json

from mrreduce.utils.errors import MalformedRecordError


def encode_record(key, value):
    """Encode one (key, value) record as a JSON line.

    Both intermediate shards and reduce output use this format:
        {"Key":"a","Value":"4"}
    """
    return json.dumps({'Key': key, 'Value': value},
                      ensure_ascii=False, separators=(',', ':')) + '\n'


def is_encodable(text):
    """True if text can be written as UTF-8 (no lone surrogates)."""
    try:
        text.encode('utf-8')
    except UnicodeEncodeError:
        return False
    return True


class RecordDecoder:
    """Streams records out of an open text file.

    Running out of lines is a clean end of stream (StopIteration). A
    line that is not a valid record raises MalformedRecordError, so a
    truncated or corrupted shard is never mistaken for a short one.
    """

    def __init__(self, file_obj, path=None):
        self.file_obj = file_obj
        self.path = path or getattr(file_obj, 'name', '<stream>')
        self.line_number = 0

    def __iter__(self):
        return self

    def __next__(self):
        return self.decode_next()

    def decode_next(self):
        """Return the next (key, value) tuple or raise StopIteration."""
        while True:
            try:
                line = self.file_obj.readline()
            except UnicodeDecodeError as e:
                raise MalformedRecordError(self.path, self.line_number + 1,
                                           f"invalid UTF-8 ({e})") from e
            if not line:
                raise StopIteration
            self.line_number += 1
            if line.strip():
                return self._parse(line)

    def _parse(self, line):
        try:
            obj = json.loads(line)
        except ValueError as e:
            raise MalformedRecordError(self.path, self.line_number, f"invalid JSON ({e})") from e

        if not isinstance(obj, dict):
            raise MalformedRecordError(self.path, self.line_number,
                                       f"expected an object, got {type(obj).__name__}")

        key = obj.get('Key')
        value = obj.get('Value')
        if not isinstance(key, str) or not isinstance(value, str):
            raise MalformedRecordError(self.path, self.line_number,
                                       "Key and Value must both be strings")
        if not (is_encodable(key) and is_encodable(value)):
            raise MalformedRecordError(self.path, self.line_number,
                                       "Key and Value must be valid Unicode (lone surrogate)")
        return key, value
