from sandoc.core.fences import FenceDescriptor, parse_fence_info


def test_language_and_export_are_extracted() -> None:
    descriptor = parse_fence_info("san export=preview")

    assert descriptor.lang == "san"
    assert descriptor.export == "preview"
    assert descriptor.caption is None
    assert dict(descriptor.attributes) == {}


def test_quoted_caption_and_flags() -> None:
    descriptor = parse_fence_info('san export=preview caption="A small demo" editable')

    assert descriptor.caption == "A small demo"
    assert dict(descriptor.attributes) == {"editable": True}


def test_empty_info_string_yields_blank_descriptor() -> None:
    assert parse_fence_info("") == FenceDescriptor()
    assert parse_fence_info(None) == FenceDescriptor()
    assert parse_fence_info("   ") == FenceDescriptor()


def test_braced_info_string_is_unwrapped() -> None:
    descriptor = parse_fence_info("{.san export=preview}")

    assert descriptor.lang == "san"
    assert descriptor.export == "preview"


def test_unbalanced_quotes_fall_back_to_whitespace_split() -> None:
    descriptor = parse_fence_info('san caption="unterminated export=preview')

    assert descriptor.lang == "san"
    assert descriptor.export == "preview"


def test_language_may_be_given_as_attribute() -> None:
    descriptor = parse_fence_info("lang=san export=preview")

    assert descriptor.lang == "san"
    assert descriptor.export == "preview"


def test_flag_export_is_not_a_string_value() -> None:
    descriptor = parse_fence_info("san export")

    assert descriptor.export is None


def test_metadata_omits_absent_fields() -> None:
    descriptor = parse_fence_info("san export=preview editable")

    assert descriptor.to_metadata() == {"lang": "san", "export": "preview", "editable": True}
    assert parse_fence_info("").to_metadata() == {}
