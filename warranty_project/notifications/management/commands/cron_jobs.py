import json

from django.core.management.base import BaseCommand, CommandError

from notifications.scheduler import JobNotFound, get_scheduler


class Command(BaseCommand):
    help = "Show scheduled job status or run a job immediately"

    def add_arguments(self, parser):
        parser.add_argument("action", choices=["status", "trigger"])
        parser.add_argument("job_name", nargs="?")

    def handle(self, *args, **options):
        scheduler = get_scheduler()

        if options["action"] == "status":
            for status in scheduler.get_status():
                data = status.as_dict()
                self.stdout.write(
                    f"{data['job_name']:<22} {data['schedule']:<12} "
                    f"{data['state']:<8} runs={data['total_runs']} "
                    f"ok={data['total_success']} failed={data['total_failures']} "
                    f"next={data['next_run'] or 'N/A'}"
                )
            return

        name = options.get("job_name")
        if not name:
            raise CommandError("trigger requires a job name")

        try:
            result = scheduler.trigger_job(name)
        except JobNotFound as exc:
            raise CommandError(str(exc))
        except Exception as exc:
            raise CommandError(f"Job '{name}' failed: {exc}")

        self.stdout.write(
            self.style.SUCCESS(f"Job '{name}' executed: {json.dumps(result, default=str)}")
        )
