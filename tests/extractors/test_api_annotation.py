from testtraverse.extractors.api_annotation import absorb_api_receiver, is_api_receiver
from testtraverse.extractors.call_chain import resolve_callee
from testtraverse.extractors.call_sites import find_calls


def calls_of(parse, source):
    return find_calls(parse(source))


def test_literal_flags(parse):
    calls = calls_of(parse, "api({ sync: false, waitAfter: true }).submit()")
    assert len(calls) == 1
    call = calls[0]
    assert call.name == "api.submit"
    assert call.api_sync_disabled
    assert call.api_wait_after
    assert call.errors == ()
    out = call.to_dict()
    assert out["apiSyncDisabled"] is True
    assert out["apiWaitAfter"] is True
    assert "errors" not in out


def test_non_literal_sync_is_deferred_error(parse):
    source = "api({ sync: someVariable, waitAfter: true }).submit()"
    call = calls_of(parse, source)[0]
    assert call.name == "api.submit"
    assert not call.api_sync_disabled
    assert call.api_wait_after
    assert len(call.errors) == 1
    assert call.errors[0].location == source.index("someVariable")
    assert '"sync"' in call.errors[0].message
    assert "apiSyncDisabled" not in call.to_dict()
    assert call.to_dict()["errors"] == [
        {"message": call.errors[0].message, "location": source.index("someVariable")}
    ]


def test_non_boolean_literal_is_deferred_error(parse):
    source = "api({ waitAfter: 'yes' }).submit()"
    call = calls_of(parse, source)[0]
    assert not call.api_wait_after
    assert call.errors[0].location == source.index("'yes'")
    assert '"waitAfter"' in call.errors[0].message


def test_shorthand_property_is_deferred_error(parse):
    source = "api({ sync }).submit()"
    call = calls_of(parse, source)[0]
    assert call.errors[0].location == source.index("sync")


def test_default_values_set_no_flag(parse):
    call = calls_of(parse, "api({ sync: true, waitAfter: false }).submit()")[0]
    assert not call.api_sync_disabled
    assert not call.api_wait_after
    assert call.errors == ()


def test_receiver_without_configuration(parse):
    call = calls_of(parse, "api().submit()")[0]
    assert call.name == "api.submit"
    assert not call.api_sync_disabled


def test_namespace_access_has_no_configuration(parse):
    call = calls_of(parse, "api.central.fetch({ sync: false })")[0]
    assert call.name == "api.central.fetch"
    assert not call.api_sync_disabled


def test_bare_api_call_is_never_reported(parse):
    assert calls_of(parse, "api({ sync: false })") == ()
    names = [c.name for c in calls_of(parse, "api({ sync: false }).a.b()")]
    assert names == ["api.a.b"]


def test_receiver_with_two_arguments_is_not_absorbed(parse):
    call = calls_of(parse, "api({ sync: false }, other).submit()")[0]
    assert call.name == "api().submit"
    assert not call.api_sync_disabled


def test_only_the_directly_chained_call_is_configured(parse):
    calls = {c.name: c for c in calls_of(parse, "api({ sync: false }).submit().then(done)")}
    assert calls["api.submit"].api_sync_disabled
    assert not calls["api.submit().then"].api_sync_disabled


def test_absorb_api_receiver(outermost_call):
    def absorbed(source):
        callee = outermost_call(source).callee
        return absorb_api_receiver(resolve_callee(callee), callee)

    assert absorbed("api().submit()") == "api.submit"
    assert absorbed("api({ sync: false }).a.b()") == "api.a.b"
    assert absorbed("api(a, b).submit()") == "api().submit"
    assert absorbed("cy.api().submit()") == "cy.api().submit"
    assert absorbed("api.submit()") == "api.submit"


def test_is_api_receiver(outermost_call):
    assert is_api_receiver(outermost_call("api({})"))
    assert not is_api_receiver(outermost_call("api(a, b)"))
    assert not is_api_receiver(outermost_call("apiX()"))
