"""
Django management command to recompute denormalized counters from the rows
they summarize

Usage:
    python manage.py reconcile_counters
    python manage.py reconcile_counters --dry-run  # Report drift without fixing it
"""

import time

from django.core.management.base import BaseCommand
from django.db import transaction
from django.db.models import Count, F, IntegerField, OuterRef, Subquery, Value
from django.db.models.functions import Coalesce

from posts.models import Comment, CommentLike, Like, Post
from users.models import Follow, User


def counted(related_queryset, group_field: str):
    """Correlated COUNT(*) of related rows, 0 when there are none."""
    subquery = (
        related_queryset.order_by()
        .values(group_field)
        .annotate(total=Count("pk"))
        .values("total")[:1]
    )
    return Coalesce(
        Subquery(subquery, output_field=IntegerField()),
        Value(0),
        output_field=IntegerField(),
    )


def counter_checks():
    return [
        (Post, "likes_count", counted(Like.objects.filter(post=OuterRef("pk")), "post")),
        (
            Post,
            "comments_count",
            counted(
                Comment.objects.filter(post=OuterRef("pk"), is_deleted=False), "post"
            ),
        ),
        (
            Comment,
            "replies_count",
            counted(
                Comment.objects.filter(parent=OuterRef("pk"), is_deleted=False),
                "parent",
            ),
        ),
        (
            Comment,
            "likes_count",
            counted(CommentLike.objects.filter(comment=OuterRef("pk")), "comment"),
        ),
        (
            User,
            "followers_count",
            counted(Follow.objects.filter(following=OuterRef("pk")), "following"),
        ),
        (
            User,
            "following_count",
            counted(Follow.objects.filter(follower=OuterRef("pk")), "follower"),
        ),
    ]


class Command(BaseCommand):
    help = "Recompute like, comment, reply and follow counters from their source rows"

    def add_arguments(self, parser):
        parser.add_argument(
            "--dry-run",
            action="store_true",
            help="Report counters that drifted without repairing them",
        )

    def handle(self, *args, **options):
        dry_run = options["dry_run"]
        started = time.perf_counter()

        self.stdout.write(
            self.style.SUCCESS(
                f"{'[DRY RUN] ' if dry_run else ''}Reconciling counters..."
            )
        )

        total_repaired = 0
        for model, field, expected in counter_checks():
            drifted = (
                model.objects.annotate(expected=expected)
                .exclude(**{field: F("expected")})
                .values_list("pk", field, "expected")
            )

            repaired = 0
            with transaction.atomic():
                for pk, stored, actual in list(drifted):
                    self.stdout.write(
                        f"  {model.__name__} {pk}: {field} {stored} -> {actual}"
                    )
                    if not dry_run:
                        model.objects.filter(pk=pk).update(**{field: actual})
                    repaired += 1

            self.stdout.write(f"{model.__name__}.{field}: {repaired} drifted")
            total_repaired += repaired

        elapsed = time.perf_counter() - started
        self.stdout.write(
            self.style.SUCCESS(
                f"{'[DRY RUN] ' if dry_run else ''}Done in {elapsed:.2f}s. "
                f"Rows {'to repair' if dry_run else 'repaired'}: {total_repaired}"
            )
        )
