# -*- coding: utf-8 -*-
"""Project metadata."""

import __about__


def test_metadata_summary():
    summary = __about__.metadata_summary()
    assert summary["title"] == "Tint"
    assert summary["version"] == __about__.__version__
    assert summary["license"] == "LGPL-3.0-or-later"
