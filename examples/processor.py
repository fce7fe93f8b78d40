"""
An example sardine processor, handling `toc`, `listing` and `include`
placeholders.

Run sardine with it as:

    sardine examples/basic_site -- python examples/processor.py
"""
import html
import json
import sys

import markdown_it


PROTOCOL_VERSION = 1
md = markdown_it.MarkdownIt('commonmark')


def render_toc(request):
    items = []
    for heading in request['value']:
        indent = '  ' * (heading['level'] - 1)
        items.append(
            f'{indent}<li class="toc-{heading["level"]}">'
            f'<a href="#{html.escape(heading["id"] or "")}">{html.escape(heading["text"])}</a></li>'
        )
    return '<ul class="toc">\n' + '\n'.join(items) + '\n</ul>'


def render_listing(request):
    documents = sorted(request['value'], key=lambda d: d['date'], reverse=True)
    items = [
        f'<li><time>{d["date"]}</time> {html.escape(d["title"])}</li>'
        for d in documents
        if d['path'] != request['ctx']['path']
    ]
    return '<ul class="listing">\n' + '\n'.join(items) + '\n</ul>'


def render_include(request):
    value = request['value']
    if value['raw']:
        return value['text']
    return md.render(value['text'])


HANDLERS = {
    'toc': render_toc,
    'listing': render_listing,
    'include': render_include,
}


def main():
    for line in sys.stdin:
        request = json.loads(line)
        try:
            response = {'v': PROTOCOL_VERSION, 'value': HANDLERS[request['ty']](request)}
        except KeyError as e:
            response = {'v': PROTOCOL_VERSION, 'error': f'unsupported request: {e}'}
        sys.stdout.write(json.dumps(response) + '\n')
        sys.stdout.flush()


if __name__ == '__main__':
    main()
