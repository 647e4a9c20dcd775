"""Tests for variant generation and the filtered operations it installs."""

from unittest.mock import Mock

import pytest

from mongo_soft_delete import OverridableMethod, SoftDeleteOptions, Variant
from mongo_soft_delete.operations import OperationKind
from mongo_soft_delete.soft_delete import generate_variants
from mongo_soft_delete.soft_delete.variants import HANDLER_FACTORIES, VARIANTS_BY_KIND
from mongo_soft_delete.store import Query


class TestOperations:
    """Test the closed operation enumerations."""

    @pytest.mark.parametrize(
        "method, kind",
        [
            (OverridableMethod.FIND, OperationKind.READ),
            (OverridableMethod.COUNT, OperationKind.READ),
            (OverridableMethod.UPDATE_MANY, OperationKind.MUTATION),
            (OverridableMethod.FIND_ONE_AND_UPDATE, OperationKind.MUTATION),
            (OverridableMethod.AGGREGATE, OperationKind.AGGREGATE),
        ],
    )
    def test_kinds(self, method, kind):
        """Each method belongs to one kind."""
        assert method.kind is kind

    def test_lookup(self):
        """Names resolve in either spelling; unknown names do not."""
        assert OverridableMethod.lookup("findOneAndUpdate") is (
            OverridableMethod.FIND_ONE_AND_UPDATE
        )
        assert OverridableMethod.lookup("update_one") is OverridableMethod.UPDATE_ONE
        assert OverridableMethod.lookup("remove") is None
        assert OverridableMethod.lookup(None) is None

    def test_method_names(self):
        """Variant names are the method name plus the suffix."""
        assert Variant.DEFAULT.method_name(OverridableMethod.FIND) == "find"
        assert Variant.DELETED.method_name(OverridableMethod.FIND) == "find_deleted"
        assert (
            Variant.WITH_DELETED.method_name(OverridableMethod.COUNT)
            == "count_with_deleted"
        )

    def test_every_kind_is_registered(self):
        """The registry covers every operation kind."""
        assert set(HANDLER_FACTORIES) == set(OperationKind)
        assert set(VARIANTS_BY_KIND) == set(OperationKind)


class TestGenerateVariants:
    """Test which statics are generated."""

    def test_nothing_overridden(self):
        """No overridden methods means no statics."""
        assert generate_variants(SoftDeleteOptions()) == {}

    def test_read_method(self):
        """Read methods get all three variants."""
        statics = generate_variants(
            SoftDeleteOptions.model_validate({"overrideMethods": ["find"]})
        )

        assert sorted(statics) == ["find", "find_deleted", "find_with_deleted"]
        assert statics["find_deleted"].__name__ == "find_deleted"

    def test_aggregate_has_no_default_variant(self):
        """aggregate itself is filtered by the hook, not a static."""
        statics = generate_variants(
            SoftDeleteOptions.model_validate({"overrideMethods": ["aggregate"]})
        )

        assert sorted(statics) == ["aggregate_deleted", "aggregate_with_deleted"]

    def test_all_methods(self):
        """Every method yields its variants."""
        statics = generate_variants(
            SoftDeleteOptions.model_validate({"overrideMethods": "all"})
        )

        assert len(statics) == 3 * (len(OverridableMethod) - 1) + 2
        assert "update_one_with_deleted" in statics
        assert "count_documents_deleted" in statics


@pytest.mark.integration
class TestReadVariants:
    """Test filtered reads against a collection."""

    def test_default_hides_deleted(self, Pet, populated):
        """find excludes deleted documents."""
        names = sorted(pet.name for pet in Pet.find({"species": "dog"}).exec())

        assert names == ["Fido", "Rex"]

    def test_with_deleted_shows_all(self, Pet, populated):
        """find_with_deleted includes deleted documents."""
        names = sorted(
            pet.name for pet in Pet.find_with_deleted({"species": "dog"}).exec()
        )

        assert names == ["Fido", "Old Yeller", "Rex"]

    def test_returns_chainable_query(self, Pet, populated):
        """Filtered reads still return a query that can be refined."""
        query = Pet.find({"species": "dog"})

        assert isinstance(query, Query)
        assert query.get_filter() == {"species": "dog", "deleted_at": {"$eq": None}}
        assert [pet.name for pet in query.where({"name": "Rex"}).exec()] == ["Rex"]

    def test_literal_predicate_form(self, make_model):
        """With use$neOperator off the literal form is used."""
        Pet = make_model({"overrideMethods": ["find"], "use$neOperator": False})

        assert Pet.find().get_filter() == {"deleted_at": None}

    def test_find_one(self, Pet, populated):
        """find_one cannot see a deleted document."""
        old_id = populated["old"]._id

        assert Pet.find_one({"_id": old_id}).exec() is None
        assert Pet.find_one_with_deleted({"_id": old_id}).exec()._id == old_id

    def test_counts(self, Pet, populated):
        """Every count variant agrees with the visibility rules."""
        assert Pet.count().exec() == 3
        assert Pet.count_documents({"species": "dog"}).exec() == 2
        assert Pet.count_deleted().exec() == 3
        assert Pet.count_with_deleted().exec() == 4
        assert Pet.count_documents_with_deleted({"species": "dog"}).exec() == 3

    def test_callback(self, Pet, populated):
        """A callback runs the filtered query immediately."""
        callback = Mock()

        result = Pet.count_documents({"species": "dog"}, callback)

        assert result == 2
        callback.assert_called_once_with(None, 2)

    def test_with_deleted_callback(self, Pet, populated):
        """The unfiltered variant forwards callbacks to the store."""
        callback = Mock()

        Pet.count_with_deleted(callback)

        callback.assert_called_once_with(None, 4)

    def test_reused_filter_is_unchanged(self, Pet, populated):
        """The same filter can be passed to find repeatedly."""
        conditions = {"deleted_at": {"$ne": 1}, "$and": [{"name": "Rex"}]}

        first = [pet.name for pet in Pet.find(conditions).exec()]
        second = [pet.name for pet in Pet.find(conditions).exec()]

        assert first == second == ["Rex"]
        assert conditions == {"deleted_at": {"$ne": 1}, "$and": [{"name": "Rex"}]}

    def test_caller_cannot_widen_default(self, Pet, populated):
        """Asking the default variant for deleted documents finds none."""
        assert Pet.find({"deleted_at": {"$ne": None}}).exec() == []
        assert len(Pet.find_with_deleted({"deleted_at": {"$ne": None}}).exec()) == 1


@pytest.mark.integration
class TestMutationVariants:
    """Test filtered updates against a collection."""

    def test_update_many_skips_deleted(self, Pet, populated, collection):
        """Default updates leave deleted documents untouched."""
        result = Pet.update_many({"species": "dog"}, {"species": "wolf"})

        assert result.matched_count == 2
        old = collection.find_one({"_id": populated["old"]._id})
        assert old["species"] == "dog"

    def test_update_many_with_deleted(self, Pet, populated):
        """The unfiltered variant reaches deleted documents."""
        result = Pet.update_many_with_deleted({"species": "dog"}, {"species": "wolf"})

        assert result.matched_count == 3

    def test_deleted_variant_aliases_default(self, Pet, populated):
        """The _deleted variant filters exactly like the default one."""
        result = Pet.update_one_deleted(
            {"_id": populated["old"]._id}, {"name": "Renamed"}
        )

        assert result.matched_count == 0

    def test_caller_deleted_at_is_overwritten(self, Pet, populated, collection):
        """A caller deleted_at condition is replaced by the alive predicate."""
        result = Pet.update_many({"deleted_at": {"$ne": None}}, {"name": "Ghost"})

        assert result.matched_count == 3
        old = collection.find_one({"_id": populated["old"]._id})
        assert old["name"] == "Old Yeller"

    def test_payload_only_call(self, Pet, populated):
        """A single payload updates an alive document."""
        result = Pet.update({"name": "Renamed"})

        assert result.matched_count == 1
        assert Pet.count_documents_with_deleted({"name": "Renamed"}).exec() == 1

    def test_callback_in_update_slot(self, Pet, populated):
        """The callback form updates all alive documents."""
        callback = Mock()

        Pet.update_many({"species": "bird"}, callback)

        error, result = callback.call_args.args
        assert error is None
        assert result.matched_count == 3

    def test_keyword_call(self, Pet, populated):
        """Arguments may be passed by name."""
        result = Pet.update_many(conditions={"species": "cat"}, update={"name": "T"})

        assert result.matched_count == 1

    def test_find_one_and_update(self, Pet, populated):
        """find_one_and_update skips deleted documents."""
        old_id = populated["old"]._id

        assert Pet.find_one_and_update({"_id": old_id}, {"name": "x"}) is None
        found = Pet.find_one_and_update_with_deleted(
            {"_id": old_id}, {"name": "x"}, {"new": True}
        )
        assert found.name == "x"


@pytest.mark.integration
class TestAggregateVariants:
    """Test filtered aggregations against a collection."""

    PIPELINE = [{"$match": {"species": "dog"}}, {"$sort": {"name": 1}}]

    def names(self, result):
        return [doc["name"] for doc in result]

    def test_plain_aggregate_is_filtered(self, Pet, populated):
        """The pre-aggregate hook filters plain aggregate calls."""
        result = Pet.aggregate(list(self.PIPELINE)).exec()

        assert self.names(result) == ["Fido", "Rex"]

    def test_aggregate_deleted(self, Pet, populated):
        """aggregate_deleted excludes deleted documents."""
        aggregate = Pet.aggregate_deleted(list(self.PIPELINE))

        assert self.names(aggregate.exec()) == ["Fido", "Rex"]

    def test_aggregate_with_deleted(self, Pet, populated):
        """aggregate_with_deleted includes deleted documents."""
        aggregate = Pet.aggregate_with_deleted(list(self.PIPELINE))

        assert self.names(aggregate.exec()) == ["Fido", "Old Yeller", "Rex"]
        assert aggregate.pipeline() == self.PIPELINE

    def test_stage_prepended_exactly_once(self, Pet, populated):
        """The not-deleted stage is never duplicated."""
        aggregate = Pet.aggregate_deleted(list(self.PIPELINE))
        aggregate.exec()

        stages = aggregate.pipeline()
        assert stages[0] == {"$match": {"deleted_at": {"$eq": None}}}
        assert stages[1:] == self.PIPELINE

    def test_caller_pipeline_untouched(self, Pet, populated):
        """The pipeline list passed in is not modified."""
        pipeline = list(self.PIPELINE)

        Pet.aggregate_deleted(pipeline).exec()
        Pet.aggregate_with_deleted(pipeline).exec()

        assert pipeline == self.PIPELINE

    def test_callback(self, Pet, populated):
        """Aggregate variants forward callbacks."""
        callback = Mock()

        Pet.aggregate_with_deleted(list(self.PIPELINE), callback)

        error, result = callback.call_args.args
        assert error is None
        assert len(result) == 3
