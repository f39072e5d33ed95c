import argparse
import os
import sys

import django


def _setup():
    os.environ.setdefault('DJANGO_SETTINGS_MODULE', 'pages_core.settings')
    django.setup()


def fetch(owner, repo, branch):
    from publisher_app.downloader import fetch_tree
    from publisher_app.github import GitHubClient
    from publisher_app.workspace import WorkspaceManager

    client = GitHubClient.from_settings()
    try:
        workspace = fetch_tree(client, owner, repo, branch, WorkspaceManager.from_settings())
    finally:
        client.close()
    print(f"Downloaded {owner}/{repo}@{branch} into {workspace.path}")


def publish(path, owner, repo, target):
    from django.conf import settings
    from publisher_app.github import GitHubClient
    from publisher_app.publisher import TreePublisher

    client = GitHubClient.from_settings()
    try:
        publisher = TreePublisher(client, settings.PAGES_COMMIT_MESSAGE)
        result = publisher.publish(path, owner, repo, target or settings.PAGES_TARGET_BRANCH)
    finally:
        client.close()
    print(f"Published {result.blob_count} files as commit {result.commit_sha[:7]} on {result.ref}")


def run(owner, repo, branch):
    from publisher_app.objects import PushEvent
    from publisher_app.pipeline import PagesPipeline

    pipeline = PagesPipeline.from_settings()
    try:
        result = pipeline.run(PushEvent(owner=owner, repo=repo, branch=branch))
    finally:
        pipeline.close()
    if not result.ok:
        print(f"Pipeline failed during {result.stage}: {result.error}")
        return 1
    print(f"Published {owner}/{repo}@{branch} as {result.publish.commit_sha[:7]}")
    return 0


def hash_file(path):
    from publisher_app.helpers import hash_object

    with open(path, 'rb') as f:
        print(hash_object(f.read(), 'blob'))


def main(argv=None):
    parser = argparse.ArgumentParser(description="pages_git command")
    parser.add_argument('command', choices=['fetch', 'publish', 'run', 'hash'], help='pages_git commands')
    parser.add_argument('-p', '--path', type=str, help='Output directory for publish, file for hash')
    parser.add_argument('-o', '--owner', type=str, help='Repository owner')
    parser.add_argument('-r', '--repo_name', type=str, help='Repository name')
    parser.add_argument('-b', '--branch', type=str, help='Source branch for fetch and run')
    parser.add_argument('-t', '--target', type=str, help='Target branch for publish')

    args = parser.parse_args(argv)

    if args.command == 'hash':
        if not args.path:
            parser.error('hash requires a -p path')
        hash_file(args.path)
        return 0

    if not args.owner or not args.repo_name:
        parser.error(f'{args.command} requires -o owner and -r repo name')

    _setup()
    from publisher_app.errors import PipelineError

    try:
        if args.command == 'publish':
            if not args.path:
                parser.error('publish requires a -p path')
            publish(args.path, args.owner, args.repo_name, args.target)
            return 0
        if not args.branch:
            parser.error(f'{args.command} requires a -b branch')
        if args.command == 'fetch':
            fetch(args.owner, args.repo_name, args.branch)
            return 0
        return run(args.owner, args.repo_name, args.branch)
    except PipelineError as exc:
        print(f"{args.command} failed: {exc}")
        return 1


if __name__ == '__main__':
    sys.exit(main())
