"""Tests for deck membership, bucket queries and answer recording."""

from datetime import timedelta

import pytest

from recall import (
    Card,
    Deck,
    DuplicateError,
    FibonacciSequence,
    InMemoryRepository,
    LeitnerSystem,
    NotFoundError,
    ProgressState,
    RecallConfig,
    create_learner,
    destroy_learner,
)
from tests.helpers import START


# ---- Review (Fibonacci) ----

class TestReviewWithFibonacci:

    def test_card_marked_right_a_few_times_is_not_in_review(self, fibonacci_deck, word):
        fibonacci_deck.add(word)
        for _ in range(3):
            fibonacci_deck.right_answer_for(word)

        assert word not in fibonacci_deck.review()
        assert word in fibonacci_deck.known()

    def test_card_marked_wrong_afterwards_is_back_in_review(self, fibonacci_deck, word):
        fibonacci_deck.add(word)
        for _ in range(3):
            fibonacci_deck.right_answer_for(word)

        fibonacci_deck.wrong_answer_for(word)

        assert word in fibonacci_deck.review()
        assert word in fibonacci_deck.failed()


# ---- Review (Leitner) ----

class TestReviewWithLeitner:

    def test_review_is_untested_plus_failed_plus_expired(self, leitner_deck, word, other_word):
        leitner_deck.add(word)
        leitner_deck.add(other_word)

        assert leitner_deck.known().count() == 0
        combined = (
            leitner_deck.untested().cards()
            + leitner_deck.failed().cards()
            + leitner_deck.expired().cards()
        )
        assert sorted(card.id for card in combined) == sorted(card.id for card in leitner_deck.review())

    def test_marking_words_right_and_wrong(self, leitner_deck, word, other_word):
        leitner_deck.add(word)
        leitner_deck.add(other_word)
        assert leitner_deck.count() == 2
        assert leitner_deck.review().count() == 2

        for index, card in enumerate(leitner_deck.review()):
            if index % 2 == 0:
                leitner_deck.right_answer_for(card)
            else:
                leitner_deck.wrong_answer_for(card)

        assert leitner_deck.review().count() == 1

    def test_next_returns_one_card_at_a_time(self, leitner_deck, word, other_word):
        leitner_deck.add(word)
        leitner_deck.add(other_word)
        assert leitner_deck.known().count() == 0

        card = leitner_deck.next()
        assert card in leitner_deck.untested()
        leitner_deck.right_answer_for(card)

        card = leitner_deck.next()
        assert card in leitner_deck.untested()
        leitner_deck.right_answer_for(card)

        assert leitner_deck.next() is None

    def test_review_is_chainable(self, leitner_deck, word, other_word):
        leitner_deck.add(word)
        leitner_deck.add(other_word)
        for card in leitner_deck:
            leitner_deck.wrong_answer_for(card)

        relation = leitner_deck.review().where(front=word.front)

        assert word in relation
        assert other_word not in relation

    def test_where_rejects_unknown_attributes_immediately(self, leitner_deck):
        with pytest.raises(ValueError, match="kanji"):
            leitner_deck.review().where(kanji="日")

    def test_item_created_with_a_stored_level_starts_at_box_one(self, leitner_deck, repository, learner, word):
        repository.create_item(learner.id, word.id, ProgressState(progress_level=4))
        assert word in leitner_deck.untested()

        leitner_deck.right_answer_for(word)

        item = leitner_deck.item_for(word)
        assert item.progress_level == 1
        assert item.due_at == START + timedelta(days=1)

    def test_narrowing_never_leaves_the_bucket(self, leitner_deck, word, other_word):
        leitner_deck.add(word)
        leitner_deck.add(other_word)
        leitner_deck.right_answer_for(word)

        narrowed = leitner_deck.review().filter(lambda card: card.back == "Japanese language")

        assert narrowed.cards() == [other_word]

    def test_correct_answer_expires_after_its_interval(self, leitner_deck, clock, word):
        leitner_deck.add(word)
        leitner_deck.right_answer_for(word)
        assert word in leitner_deck.known()

        clock.advance(days=1)

        assert word in leitner_deck.expired()
        assert word in leitner_deck.review()

    def test_buckets_can_be_evaluated_at_a_fixed_time(self, leitner_deck, word):
        leitner_deck.add(word)
        leitner_deck.right_answer_for(word)

        assert word in leitner_deck.known(now=START + timedelta(hours=23))
        assert word in leitner_deck.expired(now=START + timedelta(days=1))
        assert word in leitner_deck.review().at(START + timedelta(days=2))

    def test_mastered_requires_the_top_box(self, leitner_deck, clock, word, other_word):
        leitner_deck.add(word)
        leitner_deck.add(other_word)
        for _ in range(5):
            leitner_deck.right_answer_for(word)
        leitner_deck.right_answer_for(other_word)

        assert leitner_deck.known().count() == 2
        assert leitner_deck.mastered().cards() == [word]


# ---- next() ----

class TestNext:

    def test_empty_deck_returns_none(self, leitner_deck):
        assert leitner_deck.next() is None

    def test_untested_cards_come_first_then_earliest_due(self, leitner_deck, clock, repository, word, other_word):
        third = repository.add_card(Card(id="third", front="三"))
        for card in (word, other_word, third):
            leitner_deck.add(card)

        leitner_deck.wrong_answer_for(word)
        clock.advance(hours=1)
        leitner_deck.wrong_answer_for(other_word)
        clock.advance(hours=1)

        assert leitner_deck.next() == third
        leitner_deck.right_answer_for(third)

        assert leitner_deck.review().order_by_due().cards() == [word, other_word]
        assert leitner_deck.next() == word

    def test_ties_break_by_insertion_order_not_id(self, leitner_deck, repository):
        cards = [repository.add_card(Card(id=card_id, front=card_id)) for card_id in ("z", "a", "m")]
        for card in cards:
            leitner_deck.add(card)

        assert leitner_deck.next() == cards[0]

        for card in reversed(cards):
            leitner_deck.wrong_answer_for(card)

        assert leitner_deck.next() == cards[0]
        assert leitner_deck.review().order_by_due().cards() == cards


# ---- Membership ----

class TestMembership:

    def test_add_puts_the_card_in_the_deck(self, leitner_deck, word):
        item = leitner_deck.add(word)

        assert list(leitner_deck) == [word]
        assert item.progress_level == 0
        assert item.due_at is None
        assert word in leitner_deck.untested()

    def test_duplicate_card_raises(self, leitner_deck, word):
        leitner_deck.add(word)
        assert list(leitner_deck) == [word]

        with pytest.raises(DuplicateError) as excinfo:
            leitner_deck.add(word)
        assert excinfo.value.card_id == word.id

    def test_try_add_reports_duplicates_without_raising(self, leitner_deck, word):
        first = leitner_deck.try_add(word)
        second = leitner_deck.try_add(word)

        assert first.ok and first.item.card_id == word.id
        assert not second.ok
        assert isinstance(second.error, DuplicateError)
        assert leitner_deck.count() == 1

    def test_add_unknown_card_raises_not_found(self, leitner_deck):
        with pytest.raises(NotFoundError):
            leitner_deck.add(Card(id="missing", front="?"))

    def test_last_is_the_most_recently_added(self, leitner_deck, word, other_word):
        assert leitner_deck.last() is None
        leitner_deck.add(word)
        leitner_deck.add(other_word)

        assert leitner_deck.last() == other_word

    def test_iteration_keeps_insertion_order(self, leitner_deck, repository, word, other_word):
        extra = repository.add_card(Card(id="aaa", front="a"))
        for card in (other_word, extra, word):
            leitner_deck.add(card)

        assert list(leitner_deck) == [other_word, extra, word]
        assert leitner_deck.all().order_by_id().cards() == [extra, word, other_word]

    def test_remove_keeps_card_and_learner(self, leitner_deck, repository, learner, word):
        assert word not in leitner_deck
        leitner_deck.add(word)
        assert word in leitner_deck

        leitner_deck.remove(word)

        assert word not in leitner_deck
        assert repository.get_card(word.id) == word
        assert repository.get_learner(learner.id) == learner

    def test_remove_absent_card_is_silent(self, leitner_deck, word):
        leitner_deck.remove(word)
        assert leitner_deck.count() == 0

    def test_answer_for_removed_card_raises_not_found(self, leitner_deck, word):
        leitner_deck.add(word)
        leitner_deck.remove(word)

        with pytest.raises(NotFoundError):
            leitner_deck.right_answer_for(word)

    def test_items_with_missing_cards_are_left_out_everywhere(self, clock):
        repository = InMemoryRepository()
        learner = create_learner(repository, "Robert", learner_id="robert")
        kept = repository.add_card(Card(id="kept", front="残る"))
        gone = repository.add_card(Card(id="gone", front="消える"))
        deck = Deck(repository, learner.id, clock=clock)
        deck.add(kept)
        deck.add(gone)

        # Cards are owned outside the deck and can vanish under it
        del repository._cards[gone.id]

        buckets = [deck.untested(), deck.known(), deck.failed(), deck.expired()]
        assert deck.count() == len(deck) == len(list(deck)) == 1
        assert sum(bucket.count() for bucket in buckets) == deck.count()
        assert gone not in deck
        assert gone.id not in deck
        assert kept in deck
    def test_other_learners_deck_is_separate(self, repository, leitner_deck, clock, word):
        other = Deck(repository, "someone-else", clock=clock)
        leitner_deck.add(word)

        assert other.count() == 0
        assert word not in other.review()


# ---- Destroy ----

class TestDestroy:

    def test_destroying_learner_removes_items_but_not_cards(self, repository, leitner_deck, learner, word, other_word):
        leitner_deck.add(word)
        leitner_deck.add(other_word)

        removed = destroy_learner(repository, learner.id)

        assert removed == 2
        assert repository.get_learner(learner.id) is None
        assert repository.list_items(learner.id) == []
        assert repository.get_card(word.id) == word
        assert repository.get_card(other_word.id) == other_word

    def test_destroying_learner_without_items(self, repository, learner):
        assert destroy_learner(repository, learner.id) == 0

    def test_destroying_unknown_learner_raises(self, repository):
        with pytest.raises(NotFoundError):
            destroy_learner(repository, "nobody")


# ---- Configuration Scoping ----

def test_switching_algorithm_only_affects_the_new_view(leitner_deck, word):
    fibonacci_view = leitner_deck.with_algorithm(FibonacciSequence())
    leitner_deck.add(word)

    fibonacci_view.right_answer_for(word)

    assert isinstance(leitner_deck.algorithm, LeitnerSystem)
    assert isinstance(fibonacci_view.algorithm, FibonacciSequence)
    assert leitner_deck.item_for(word).due_at == fibonacci_view.item_for(word).due_at


def test_default_config_is_leitner(repository, learner):
    deck = Deck(repository, learner.id)
    assert isinstance(deck.algorithm, LeitnerSystem)
    assert deck.config == RecallConfig(algorithm=deck.algorithm)
